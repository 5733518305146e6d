"""
Modelos de dados para o sistema LayPlanner
"""

from typing import List, Optional, Dict
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator
from enum import Enum


class CutPriority(str, Enum):
    """Prioridade do otimizador"""
    MIN_WASTE = "min_waste"   # Menor sobreprodução, mesmo com mais cortes
    MIN_CUTS = "min_cuts"     # Menos cortes, aceitando mais sobreprodução


class OrderItem(BaseModel):
    """Estado de trabalho de um tamanho durante a otimização"""
    model_config = ConfigDict(frozen=True)

    size: str = Field(..., description="Tamanho (P, M, G, ...)")
    quantity: int = Field(..., ge=1, description="Quantidade pedida")
    remaining: int = Field(..., ge=0, description="Quantidade ainda não produzida")

    @model_validator(mode="after")
    def validate_remaining(self):
        if self.remaining > self.quantity:
            raise ValueError("Quantidade restante não pode exceder a pedida")
        return self

    def consume(self, produced: int) -> "OrderItem":
        """Retorna um novo estado com a produção descontada (mínimo zero)"""
        return OrderItem(
            size=self.size,
            quantity=self.quantity,
            remaining=max(0, self.remaining - produced),
        )


class Cut(BaseModel):
    """Um corte: altura de enfesto comum a todos os blocos"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cut_number: int = Field(..., alias="cutNumber", ge=1, description="Número sequencial do corte")
    stack_size: int = Field(..., alias="stackSize", ge=1, description="Altura do enfesto (camadas)")
    blocks: Dict[str, NonNegativeInt] = Field(..., description="Blocos alocados por tamanho")

    @property
    def total_blocks(self) -> int:
        """Total de blocos usados no corte"""
        return sum(self.blocks.values())

    @property
    def cloth_used(self) -> int:
        """Tecido consumido (camadas x blocos)"""
        return self.stack_size * self.total_blocks


class CuttingPlan(BaseModel):
    """Sequência ordenada de cortes"""
    cuts: List[Cut] = Field(default_factory=list, description="Cortes em ordem de execução")
    max_blocks_per_cut: int = Field(..., ge=1, description="Blocos permitidos por corte")
    max_stacking_cloth: int = Field(..., ge=1, description="Altura máxima de enfesto")

    @property
    def cut_count(self) -> int:
        return len(self.cuts)


class CutReference(BaseModel):
    """Participação de um tamanho em um corte"""
    model_config = ConfigDict(populate_by_name=True)

    cut_number: int = Field(..., alias="cutNumber")
    blocks: int = Field(..., ge=1)


class SizeSummary(BaseModel):
    """Resumo dos cortes de um tamanho"""
    size: str
    quantity: int = Field(..., description="Quantidade pedida")
    cuts: List[CutReference] = Field(default_factory=list)


class ProductionCheck(BaseModel):
    """Comparação pedido x produzido para um tamanho"""
    size: str
    ordered: int
    produced: int
    surplus: int = Field(..., description="Produzido menos pedido (negativo = falta)")
    fulfilled: bool


class Metrics(BaseModel):
    """Métricas calculadas sobre um plano de corte"""
    production: Dict[str, int] = Field(..., description="Quantidade produzida por tamanho")
    total_waste: int = Field(..., ge=0, description="Sobreprodução total (peças)")
    total_blocks_used: int = Field(..., ge=0)
    total_cloth_used: int = Field(..., ge=0)
    block_utilization_percent: int
    stack_utilization_percent: int
    cloth_efficiency_percent: int
    summary: List[SizeSummary]
    production_verification: List[ProductionCheck]


class OptimizationRequest(BaseModel):
    """Requisição para otimização"""
    model_config = ConfigDict(populate_by_name=True)

    orders: Dict[str, int] = Field(..., description="Quantidade pedida por tamanho")
    max_blocks_per_cut: int = Field(..., alias="maxBlocksPerCut", ge=1, description="Máximo de blocos por corte")
    max_stacking_cloth: int = Field(..., alias="maxStackingCloth", ge=1, description="Altura máxima do enfesto")
    priority: Optional[CutPriority] = Field(None, description="Prioridade da otimização")


class OptimizationResult(BaseModel):
    """Resultado completo da otimização"""
    model_config = ConfigDict(populate_by_name=True)

    total_order_quantity: int = Field(..., alias="totalOrderQuantity", description="Soma das quantidades pedidas")
    total_cuts: int = Field(..., alias="totalCuts", description="Quantidade de cortes")
    cutting_plan: List[Cut] = Field(..., alias="cuttingPlan", description="Cortes em ordem")
    block_utilization_percent: int = Field(..., alias="blockUtilizationPercent")
    stack_utilization_percent: int = Field(..., alias="stackUtilizationPercent")
    cloth_efficiency_percent: int = Field(..., alias="clothEfficiencyPercent")
    total_waste: int = Field(..., alias="totalWaste", description="Sobreprodução total (peças)")
    summary: List[SizeSummary] = Field(..., description="Cortes por tamanho")
    production_verification: List[ProductionCheck] = Field(..., alias="productionVerification")
    priority: CutPriority = Field(CutPriority.MIN_WASTE, description="Prioridade utilizada")
    processing_time: float = Field(0.0, alias="processingTime", description="Tempo de processamento (ms)")
