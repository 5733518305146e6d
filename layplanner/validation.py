"""
Validação das entradas do planejador
"""

from numbers import Integral
from typing import Any, Mapping

from .exceptions import InvalidInput


def _is_integer(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def validate_orders(orders: Any, allow_empty: bool = False) -> None:
    """
    Valida o conjunto de pedidos (tamanho -> quantidade)

    Args:
        orders: Mapeamento de tamanho para quantidade
        allow_empty: Se um pedido vazio é aceito (usado pela análise)

    Raises:
        InvalidInput: Se o pedido for vazio ou tiver quantidades inválidas
    """
    if not isinstance(orders, Mapping):
        raise InvalidInput("Pedidos devem ser um mapeamento tamanho -> quantidade", "orders")

    if not orders and not allow_empty:
        raise InvalidInput("O pedido deve conter pelo menos um tamanho", "orders")

    for size, quantity in orders.items():
        if not isinstance(size, str) or not size:
            raise InvalidInput(f"Tamanho inválido: {size!r}", "orders")
        if not _is_integer(quantity):
            raise InvalidInput(
                f"Quantidade do tamanho {size} deve ser inteira: {quantity!r}", "orders"
            )
        # A análise aceita zero; a otimização exige quantidade positiva
        minimum = 0 if allow_empty else 1
        if quantity < minimum:
            raise InvalidInput(
                f"Quantidade do tamanho {size} deve ser >= {minimum}: {quantity}", "orders"
            )


def validate_constraints(max_blocks_per_cut: Any, max_stacking_cloth: Any) -> None:
    """Valida as restrições de blocos por corte e altura de enfesto"""
    for name, value in (
        ("maxBlocksPerCut", max_blocks_per_cut),
        ("maxStackingCloth", max_stacking_cloth),
    ):
        if not _is_integer(value):
            raise InvalidInput(f"{name} deve ser inteiro: {value!r}", name)
        if value < 1:
            raise InvalidInput(f"{name} deve ser >= 1: {value}", name)
