"""
Servidor FastAPI principal para o LayPlanner
"""

import logging
from typing import List

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from layplanner import LayPlanner, __version__
from layplanner.exceptions import InvalidInput, LayPlannerError
from layplanner.models import CutPriority, OptimizationRequest, OptimizationResult
from layplanner.utils import LayPlanReporter, LayPlanVisualizer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configuração do FastAPI
app = FastAPI(
    title="LayPlanner API",
    description="API para planejamento de enfesto e corte de confecções",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configuração de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Instância global do LayPlanner
lay_planner = LayPlanner()

REPORT_FORMATS = ["txt", "csv", "json", "html"]


def run_optimization(request: OptimizationRequest) -> OptimizationResult:
    """Executa a otimização traduzindo erros do núcleo para HTTP"""
    try:
        return lay_planner.optimize(request)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LayPlannerError as e:
        logger.error("Falha interna na otimização: %s", e)
        raise HTTPException(status_code=500, detail=f"Falha na otimização: {e}")


@app.get("/")
async def root():
    """Página inicial da API"""
    return {
        "message": "LayPlanner API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health")
async def health_check():
    """Verificação de saúde da API"""
    return {
        "status": "healthy",
        "service": "LayPlanner API",
        "version": __version__
    }


@app.post("/api/orders/optimize-cutting", response_model=OptimizationResult)
def optimize_cutting(request: OptimizationRequest):
    """
    Calcula o plano de corte para um pedido

    Args:
        request: Pedido por tamanho e restrições da mesa de corte

    Returns:
        Plano de corte com métricas
    """
    logger.info(
        "Otimizando pedido: %d tamanhos, %d blocos/corte, enfesto %d",
        len(request.orders), request.max_blocks_per_cut, request.max_stacking_cloth
    )
    return run_optimization(request)


@app.post("/optimize/batch")
def optimize_batch(requests: List[OptimizationRequest]):
    """
    Otimização em lote de múltiplos pedidos

    Args:
        requests: Lista de requisições de otimização

    Returns:
        Resultado ou erro de cada requisição
    """
    results = []
    for request in requests:
        try:
            result = lay_planner.optimize(request)
            results.append({
                "success": True,
                "result": result.model_dump(by_alias=True, mode="json"),
            })
        except LayPlannerError as e:
            results.append({"success": False, "error": str(e)})

    return {
        "total_requests": len(requests),
        "successful": len([r for r in results if r["success"]]),
        "failed": len([r for r in results if not r["success"]]),
        "results": results
    }


@app.get("/priorities")
async def get_priorities():
    """Retorna as prioridades de otimização disponíveis"""
    return {
        "priorities": [priority.value for priority in CutPriority],
        "default": lay_planner.priority.value
    }


@app.post("/report/generate")
def generate_report(optimization_result: OptimizationResult, format: str = "all"):
    """
    Gera relatórios em diferentes formatos

    Args:
        optimization_result: Resultado da otimização
        format: Formato do relatório (txt, csv, json, html, all)

    Returns:
        Relatório no formato solicitado
    """
    formats = REPORT_FORMATS if format == "all" else [format]
    unknown = [f for f in formats if f not in REPORT_FORMATS]
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Formato não suportado: {', '.join(unknown)}. Use {', '.join(REPORT_FORMATS)} ou all."
        )

    reporter = LayPlanReporter(optimization_result)
    results = {}

    if "txt" in formats:
        results["txt"] = reporter.generate_text_report()

    if "json" in formats:
        results["json"] = optimization_result.model_dump(by_alias=True, mode="json")

    if "csv" in formats:
        results["csv"] = reporter.generate_csv_report()

    if "html" in formats:
        results["html"] = reporter.generate_html_report()

    return {
        "formats_generated": formats,
        "results": results
    }


@app.post("/visualization/create")
def create_visualization(optimization_result: OptimizationResult, chart: str = "plan"):
    """
    Cria visualização do resultado de otimização

    Args:
        optimization_result: Resultado da otimização
        chart: Tipo de gráfico (plan, summary)

    Returns:
        Imagem PNG
    """
    visualizer = LayPlanVisualizer(optimization_result)
    try:
        content = visualizer.render_png(chart)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(content=content, media_type="image/png")


@app.get("/examples")
async def get_example():
    """Retorna exemplo de dados para otimização"""
    return {
        "orders": {
            "S": 120,
            "M": 200,
            "L": 180,
            "XL": 60
        },
        "maxBlocksPerCut": 6,
        "maxStackingCloth": 40,
        "priority": CutPriority.MIN_WASTE.value
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
