#!/usr/bin/env python3
"""
Script principal para executar o sistema LayPlanner
"""

import sys
import argparse
from pathlib import Path

from layplanner import LayPlanner, LayPlannerError
from layplanner.models import CutPriority
from layplanner.utils import export_result, create_visualization


def parse_orders(text: str) -> dict:
    """
    Converte "S=120,M=200" em {"S": 120, "M": 200}

    Raises:
        argparse.ArgumentTypeError: Se o texto estiver mal formatado
    """
    orders = {}
    for chunk in text.split(","):
        size, sep, quantity = chunk.partition("=")
        size = size.strip()
        if not sep or not size:
            raise argparse.ArgumentTypeError(f"Pedido mal formatado: {chunk!r} (use TAMANHO=QTD)")
        try:
            orders[size] = int(quantity)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Quantidade inválida para {size}: {quantity!r}")
    return orders


def run_demo(orders: dict, max_blocks: int, max_stack: int, priority: CutPriority):
    """Executa demonstração do sistema"""

    print("✂️  LayPlanner - Demonstração do Sistema")
    print("=" * 60)

    planner = LayPlanner(priority=priority)

    print(f"✓ Prioridade: {planner.priority.value}")
    print(f"✓ {len(orders)} tamanhos, {sum(orders.values())} peças")
    print(f"✓ Até {max_blocks} blocos por corte, enfesto máximo de {max_stack} camadas")

    print("\n🔄 Executando otimização...")
    try:
        result = planner.optimize_orders(orders, max_blocks, max_stack)
    except LayPlannerError as e:
        print(f"❌ Falha na otimização: {e}")
        return None

    print(f"\n✅ Otimização concluída com sucesso!")
    print(f"📦 Cortes: {result.total_cuts}")
    print(f"🗑️  Desperdício: {result.total_waste} peças")
    print(f"📊 Blocos: {result.block_utilization_percent}% | Enfesto: {result.stack_utilization_percent}% | "
          f"Tecido: {result.cloth_efficiency_percent}%")
    print(f"⚡ Tempo de processamento: {result.processing_time:.1f}ms")

    print(f"\n📋 Cortes:")
    for cut in result.cutting_plan:
        blocks = ", ".join(f"{size} x{count}" for size, count in cut.blocks.items())
        print(f"  {cut.cut_number}. altura {cut.stack_size}: {blocks}")

    return result


def run_api_server(host: str, port: int, reload: bool):
    """Inicia o servidor da API"""

    print("🚀 Iniciando servidor da API LayPlanner...")

    import uvicorn

    print(f"✓ Servidor iniciado em http://{host}:{port}")
    print(f"✓ Documentação da API: http://{host}:{port}/docs")
    print("\nPressione Ctrl+C para parar o servidor")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


def run_tests():
    """Executa os testes do sistema"""

    print("🧪 Executando testes do LayPlanner...")

    import unittest

    # Descobrir e executar testes
    root = Path(__file__).parent
    loader = unittest.TestLoader()
    suite = loader.discover(str(root / 'tests'), pattern='test_*.py', top_level_dir=str(root))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    if result.wasSuccessful():
        print("\n✅ Todos os testes passaram!")
        return True

    print(f"\n❌ {len(result.failures) + len(result.errors)} testes falharam")
    return False


def main():
    """Função principal"""

    parser = argparse.ArgumentParser(
        description="LayPlanner - Planejamento de Enfesto e Corte",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos de uso:
  python run.py demo                                  # Executa demonstração
  python run.py demo --orders S=5,M=3 --max-blocks 2 --max-stack 3
  python run.py demo --export resultados --visualization
  python run.py api --port 8000                       # Inicia servidor da API
  python run.py test                                  # Executa testes
        """
    )

    parser.add_argument(
        'command',
        choices=['demo', 'api', 'test'],
        help='Comando a executar'
    )

    parser.add_argument(
        '--orders',
        type=parse_orders,
        default="S=120,M=200,L=180,XL=60",
        help='Pedido por tamanho, ex.: S=120,M=200'
    )

    parser.add_argument('--max-blocks', type=int, default=6, help='Máximo de blocos por corte')
    parser.add_argument('--max-stack', type=int, default=40, help='Altura máxima do enfesto')

    parser.add_argument(
        '--priority',
        choices=[p.value for p in CutPriority],
        default=CutPriority.MIN_WASTE.value,
        help='Prioridade da otimização'
    )

    parser.add_argument(
        '--export',
        metavar='DIR',
        help='Diretório para exportar resultados'
    )

    parser.add_argument(
        '--visualization',
        action='store_true',
        help='Criar visualizações dos resultados'
    )

    parser.add_argument('--host', default='0.0.0.0', help='Endereço do servidor')
    parser.add_argument('--port', type=int, default=8000, help='Porta do servidor')
    parser.add_argument('--reload', action='store_true', help='Recarregar ao alterar o código')

    args = parser.parse_args()

    try:
        if args.command == 'demo':
            result = run_demo(args.orders, args.max_blocks, args.max_stack, CutPriority(args.priority))

            if result is None:
                sys.exit(1)

            if args.export:
                print(f"\n📁 Exportando resultados para: {args.export}")
                export_result(result, args.export)

                if args.visualization:
                    print("🎨 Criando visualizações...")
                    create_visualization(result, args.export)

                print("✅ Exportação concluída!")

        elif args.command == 'api':
            run_api_server(args.host, args.port, args.reload)

        elif args.command == 'test':
            success = run_tests()
            sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 Sistema interrompido pelo usuário")


if __name__ == "__main__":
    main()
