"""
Núcleo do sistema LayPlanner com o algoritmo de alocação de cortes
"""

import logging
import math
import time
from typing import Dict, List, Mapping, Optional, Tuple

from .analysis import PlanAnalyzer
from .exceptions import NonConvergence
from .models import (
    Cut, CuttingPlan, CutPriority, OrderItem,
    OptimizationRequest, OptimizationResult
)
from .validation import validate_constraints, validate_orders

logger = logging.getLogger(__name__)

Snapshot = Tuple[OrderItem, ...]


class CutPlanOptimizer:
    """
    Otimizador guloso: gera um corte por iteração até atender todos os tamanhos

    Cada iteração recebe um snapshot imutável dos itens e devolve o corte
    gerado junto com o novo snapshot.
    """

    def __init__(self, priority: CutPriority = CutPriority.MIN_WASTE):
        """
        Inicializa o otimizador

        Args:
            priority: Prioridade entre menor desperdício e menos cortes
        """
        self.priority = CutPriority(priority)

    def allocate(self, orders: Mapping[str, int], max_blocks_per_cut: int,
                 max_stacking_cloth: int) -> CuttingPlan:
        """
        Calcula o plano de corte para o pedido

        Args:
            orders: Quantidade pedida por tamanho (ordem de inserção preservada)
            max_blocks_per_cut: Máximo de blocos em um corte
            max_stacking_cloth: Altura máxima do enfesto

        Returns:
            Plano de corte que atende todos os tamanhos

        Raises:
            InvalidInput: Pedido ou restrições inválidos
            NonConvergence: Limite de iterações excedido
        """
        validate_orders(orders)
        validate_constraints(max_blocks_per_cut, max_stacking_cloth)

        items: Snapshot = tuple(
            OrderItem(size=size, quantity=quantity, remaining=quantity)
            for size, quantity in orders.items()
        )
        max_iterations = sum(item.quantity for item in items)

        cuts: List[Cut] = []
        while any(item.remaining > 0 for item in items):
            if len(cuts) >= max_iterations:
                remaining = {item.size: item.remaining for item in items if item.remaining > 0}
                logger.error("Limite de %d cortes excedido; pendente: %s", max_iterations, remaining)
                raise NonConvergence(max_iterations, remaining)

            cut, items = self.next_cut(items, len(cuts) + 1, max_blocks_per_cut, max_stacking_cloth)
            cuts.append(cut)

        logger.info(
            "Plano gerado: %d cortes para %d peças (%s)",
            len(cuts), max_iterations, self.priority.value
        )
        return CuttingPlan(
            cuts=cuts,
            max_blocks_per_cut=max_blocks_per_cut,
            max_stacking_cloth=max_stacking_cloth,
        )

    def next_cut(self, items: Snapshot, cut_number: int, max_blocks_per_cut: int,
                 max_stacking_cloth: int) -> Tuple[Cut, Snapshot]:
        """Gera um corte a partir do snapshot e retorna o snapshot atualizado"""
        stack_size = self._select_stack_size(items, max_stacking_cloth)
        allocation = self._allocate_blocks(self._rank(items), stack_size, max_blocks_per_cut)

        if allocation:
            if self.priority == CutPriority.MIN_WASTE:
                stack_size = self._refine_stack_size(items, allocation, stack_size)
        else:
            allocation, stack_size = self._fallback_allocation(items, max_stacking_cloth)

        produced = {size: blocks * stack_size for size, blocks in allocation.items()}
        items = tuple(item.consume(produced.get(item.size, 0)) for item in items)

        cut = Cut(cut_number=cut_number, stack_size=stack_size, blocks=allocation)
        logger.debug("Corte %d: altura %d, blocos %s", cut_number, stack_size, allocation)
        return cut, items

    def _select_stack_size(self, items: Snapshot, max_stacking_cloth: int) -> int:
        """Altura do enfesto limitada pela maior demanda restante"""
        largest_remaining = max(item.remaining for item in items)
        return min(max_stacking_cloth, largest_remaining)

    def _rank(self, items: Snapshot) -> List[OrderItem]:
        """Itens pendentes por quantidade restante (maior primeiro, empate pela ordem do pedido)"""
        pending = [item for item in items if item.remaining > 0]
        # sorted é estável: empates mantêm a ordem original do pedido
        return sorted(pending, key=lambda item: -item.remaining)

    def _allocate_blocks(self, ranked: List[OrderItem], stack_size: int,
                         max_blocks_per_cut: int) -> Dict[str, int]:
        """Distribui os blocos do corte de forma gulosa"""
        allocation = {}
        budget = max_blocks_per_cut

        for item in ranked:
            if budget <= 0:
                break
            blocks = min(math.ceil(item.remaining / stack_size), budget)
            if blocks > 0:
                allocation[item.size] = blocks
                budget -= blocks

        return allocation

    def _refine_stack_size(self, items: Snapshot, allocation: Dict[str, int],
                           stack_size: int) -> int:
        """
        Menor altura que ainda aproveita todos os blocos alocados

        Para cada tamanho a altura mínima viável é ceil(restante / blocos);
        usa-se o mínimo entre os tamanhos do corte.
        """
        remaining = {item.size: item.remaining for item in items}
        for size, blocks in allocation.items():
            stack_size = min(stack_size, math.ceil(remaining[size] / blocks))
        return max(1, stack_size)

    def _fallback_allocation(self, items: Snapshot,
                             max_stacking_cloth: int) -> Tuple[Dict[str, int], int]:
        """Um bloco para o menor restante positivo, com altura igual a esse restante"""
        pending = [item for item in items if item.remaining > 0]
        smallest = min(pending, key=lambda item: item.remaining)
        stack_size = min(smallest.remaining, max_stacking_cloth)
        logger.warning("Nenhum bloco alocado; usando fallback para o tamanho %s", smallest.size)
        return {smallest.size: 1}, stack_size


class LayPlanner:
    """
    Sistema principal de planejamento de enfesto e corte
    """

    def __init__(self, priority: CutPriority = CutPriority.MIN_WASTE):
        """
        Inicializa o planejador

        Args:
            priority: Prioridade padrão quando a requisição não define uma
        """
        self.priority = CutPriority(priority)
        self.analyzer = PlanAnalyzer()

    def optimize(self, request: OptimizationRequest) -> OptimizationResult:
        """
        Executa otimização e análise para uma requisição

        Args:
            request: Requisição de otimização

        Returns:
            Resultado da otimização
        """
        return self.optimize_orders(
            orders=request.orders,
            max_blocks_per_cut=request.max_blocks_per_cut,
            max_stacking_cloth=request.max_stacking_cloth,
            priority=request.priority,
        )

    def optimize_orders(self, orders: Mapping[str, int], max_blocks_per_cut: int,
                        max_stacking_cloth: int,
                        priority: Optional[CutPriority] = None) -> OptimizationResult:
        """Otimiza a partir dos valores avulsos (usado pela CLI)"""
        start_time = time.time()
        priority = CutPriority(priority or self.priority)

        optimizer = CutPlanOptimizer(priority=priority)
        plan = optimizer.allocate(orders, max_blocks_per_cut, max_stacking_cloth)
        metrics = self.analyzer.analyze(orders, plan, max_blocks_per_cut, max_stacking_cloth)

        # Calcular tempo de processamento
        processing_time = (time.time() - start_time) * 1000

        return OptimizationResult(
            total_order_quantity=sum(orders.values()),
            total_cuts=plan.cut_count,
            cutting_plan=plan.cuts,
            block_utilization_percent=metrics.block_utilization_percent,
            stack_utilization_percent=metrics.stack_utilization_percent,
            cloth_efficiency_percent=metrics.cloth_efficiency_percent,
            total_waste=metrics.total_waste,
            summary=metrics.summary,
            production_verification=metrics.production_verification,
            priority=priority,
            processing_time=processing_time,
        )
