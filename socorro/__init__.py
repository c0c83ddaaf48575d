"""Plataforma de coordenação de resposta a desastres."""
