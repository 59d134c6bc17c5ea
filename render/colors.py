"""
runner_evo module: render/colors.py

Central color palette.
"""

BG = (247, 247, 247)
GROUND = (83, 83, 83)
TEXT = (60, 60, 60)

RUNNER = (83, 83, 83)
RUNNER_LEAD = (40, 140, 90)
CACTUS = (70, 120, 70)
PTERO = (150, 80, 80)
HITBOX = (220, 60, 60)

PANEL_BG = (24, 24, 30)
PANEL_TEXT = (225, 225, 225)
NEURON_OFF = (60, 60, 70)
NEURON_ON = (90, 220, 150)
WEIGHT_POS = (80, 160, 240)
WEIGHT_NEG = (230, 90, 90)
