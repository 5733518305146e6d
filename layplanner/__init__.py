"""
LayPlanner - Planejamento de Enfesto e Corte para Confecções

Calcula a sequência de cortes que atende o pedido por tamanho respeitando
o limite de blocos por corte e a altura máxima do enfesto, reduzindo a
sobreprodução e aproveitando melhor a capacidade da mesa de corte.
"""

from .core import LayPlanner, CutPlanOptimizer
from .analysis import PlanAnalyzer
from .exceptions import LayPlannerError, InvalidInput, NonConvergence, ShortfallDetected
from .models import (
    CutPriority, OrderItem, Cut, CuttingPlan, Metrics,
    OptimizationRequest, OptimizationResult
)

__version__ = "1.0.0"
__author__ = "LayPlanner Team"

__all__ = [
    "LayPlanner",
    "CutPlanOptimizer",
    "PlanAnalyzer",
    "LayPlannerError",
    "InvalidInput",
    "NonConvergence",
    "ShortfallDetected",
    "CutPriority",
    "OrderItem",
    "Cut",
    "CuttingPlan",
    "Metrics",
    "OptimizationRequest",
    "OptimizationResult"
]
