"""
Análise de planos de corte: produção, desperdício e aproveitamento
"""

import logging
from typing import Dict, List, Mapping

import numpy as np

from .exceptions import ShortfallDetected
from .models import CuttingPlan, CutReference, Metrics, ProductionCheck, SizeSummary
from .validation import validate_constraints, validate_orders

logger = logging.getLogger(__name__)


def round_percent(part: float, whole: float, default: int = 0) -> int:
    """Percentual arredondado para o inteiro mais próximo (meio para cima)"""
    if whole == 0:
        return default
    return int(np.floor(100.0 * part / whole + 0.5))


class PlanAnalyzer:
    """Calcula métricas e verifica o atendimento de um plano de corte"""

    def analyze(self, orders: Mapping[str, int], plan: CuttingPlan,
                max_blocks_per_cut: int, max_stacking_cloth: int) -> Metrics:
        """
        Analisa o plano de corte em relação ao pedido

        Args:
            orders: Quantidade pedida por tamanho
            plan: Plano gerado pelo otimizador
            max_blocks_per_cut: Máximo de blocos por corte
            max_stacking_cloth: Altura máxima do enfesto

        Returns:
            Métricas do plano

        Raises:
            InvalidInput: Pedido ou restrições inválidos
            ShortfallDetected: Algum tamanho foi produzido abaixo do pedido
        """
        validate_orders(orders, allow_empty=True)
        validate_constraints(max_blocks_per_cut, max_stacking_cloth)

        sizes = self._collect_sizes(orders, plan)
        column = {size: i for i, size in enumerate(sizes)}

        # Matriz cortes x tamanhos com a quantidade de blocos
        blocks = np.zeros((plan.cut_count, len(sizes)), dtype=np.int64)
        for row, cut in enumerate(plan.cuts):
            for size, count in cut.blocks.items():
                blocks[row, column[size]] = count
        stacks = np.array([cut.stack_size for cut in plan.cuts], dtype=np.int64)

        produced = stacks @ blocks
        ordered = np.array([orders.get(size, 0) for size in sizes], dtype=np.int64)
        surplus = produced - ordered

        blocks_per_cut = blocks.sum(axis=1)
        total_blocks_used = int(blocks_per_cut.sum())
        total_cloth_used = int((blocks_per_cut * stacks).sum())
        total_waste = int(np.clip(surplus, 0, None).sum())

        verification = [
            ProductionCheck(
                size=size,
                ordered=int(ordered[i]),
                produced=int(produced[i]),
                surplus=int(surplus[i]),
                fulfilled=bool(surplus[i] >= 0),
            )
            for i, size in enumerate(sizes)
        ]

        shortfalls = {check.size: -check.surplus for check in verification if not check.fulfilled}
        if shortfalls:
            logger.error("Plano não atende o pedido: %s", shortfalls)
            raise ShortfallDetected(shortfalls)

        block_capacity = plan.cut_count * max_blocks_per_cut
        stack_capacity = plan.cut_count * max_stacking_cloth
        block_utilization = round_percent(total_blocks_used, block_capacity)
        stack_utilization = round_percent(int(stacks.sum()), stack_capacity)

        if block_utilization > 100 or stack_utilization > 100:
            logger.warning(
                "Aproveitamento acima da capacidade (blocos %d%%, enfesto %d%%)",
                block_utilization, stack_utilization
            )

        return Metrics(
            production={size: int(produced[i]) for i, size in enumerate(sizes)},
            total_waste=total_waste,
            total_blocks_used=total_blocks_used,
            total_cloth_used=total_cloth_used,
            block_utilization_percent=block_utilization,
            stack_utilization_percent=stack_utilization,
            cloth_efficiency_percent=round_percent(
                total_cloth_used - total_waste, total_cloth_used, default=100
            ),
            summary=self._summarize(orders, plan),
            production_verification=verification,
        )

    def _collect_sizes(self, orders: Mapping[str, int], plan: CuttingPlan) -> List[str]:
        """Tamanhos do pedido seguidos dos que aparecem só no plano"""
        sizes = list(orders)
        for cut in plan.cuts:
            for size in cut.blocks:
                if size not in orders and size not in sizes:
                    sizes.append(size)
        return sizes

    def _summarize(self, orders: Mapping[str, int], plan: CuttingPlan) -> List[SizeSummary]:
        references: Dict[str, List[CutReference]] = {size: [] for size in orders}
        for cut in plan.cuts:
            for size, count in cut.blocks.items():
                if size in references and count > 0:
                    references[size].append(CutReference(cut_number=cut.cut_number, blocks=count))

        return [
            SizeSummary(size=size, quantity=quantity, cuts=references[size])
            for size, quantity in orders.items()
        ]
