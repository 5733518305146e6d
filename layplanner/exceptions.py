"""
Exceções do sistema LayPlanner
"""

from typing import Dict


class LayPlannerError(Exception):
    """Erro base do planejador de enfesto"""


class InvalidInput(LayPlannerError):
    """Pedido ou restrições inválidos, detectados antes de qualquer alocação"""

    def __init__(self, message: str, field: str = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class NonConvergence(LayPlannerError):
    """O otimizador excedeu o limite de iterações sem atender toda a demanda"""

    def __init__(self, max_iterations: int, remaining: Dict[str, int]) -> None:
        self.max_iterations = max_iterations
        self.remaining = remaining
        super().__init__(
            f"Otimização não convergiu após {max_iterations} cortes "
            f"(pendente: {remaining})"
        )


class ShortfallDetected(LayPlannerError):
    """A verificação do plano encontrou tamanhos com produção abaixo do pedido"""

    def __init__(self, shortfalls: Dict[str, int]) -> None:
        self.shortfalls = shortfalls
        missing = ", ".join(f"{size}: faltam {qty}" for size, qty in shortfalls.items())
        super().__init__(f"Produção insuficiente para o pedido ({missing})")
