"""
Testes do LayPlanner
"""

import matplotlib

# Gráficos sem interface gráfica durante os testes
matplotlib.use("Agg")
