"""
Utilitários para visualização e relatórios do LayPlanner
"""

import html
import io
import logging
from typing import List, Dict, Optional
from pathlib import Path
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
import numpy as np
import pandas as pd

from .models import OptimizationResult

logger = logging.getLogger(__name__)


class LayPlanVisualizer:
    """Classe para visualização dos planos de corte"""

    def __init__(self, result: OptimizationResult):
        """
        Inicializa o visualizador

        Args:
            result: Resultado da otimização
        """
        self.result = result
        sizes = [entry.size for entry in result.summary]
        for cut in result.cutting_plan:
            sizes.extend(size for size in cut.blocks if size not in sizes)
        palette = plt.cm.Set3(np.linspace(0, 1, max(len(sizes), 1)))
        self.colors = {size: palette[i] for i, size in enumerate(sizes)}

    def _charts(self) -> Dict[str, tuple]:
        """Tamanho da figura e função de desenho de cada gráfico"""
        plan_height = max(3, 0.6 * len(self.result.cutting_plan) + 1.5)
        return {
            "plan": ((12, plan_height), self._draw_plan),
            "summary": ((15, 10), self._draw_summary),
        }

    def _build(self, chart: str, interactive: bool) -> Figure:
        charts = self._charts()
        if chart not in charts:
            raise ValueError(f"Gráfico desconhecido: {chart}. Use {', '.join(charts)}")

        figsize, draw = charts[chart]
        # Só figuras exibidas em tela passam pelo estado global do pyplot
        fig = plt.figure(figsize=figsize) if interactive else Figure(figsize=figsize)
        try:
            draw(fig)
        except Exception:
            self._release(fig)
            raise
        return fig

    def build_plan_figure(self, interactive: bool = False) -> Figure:
        """Monta o gráfico do plano: uma barra por corte, segmentos por tamanho"""
        return self._build("plan", interactive)

    def build_summary_figure(self, interactive: bool = False) -> Figure:
        """Monta o gráfico de resumo da otimização"""
        return self._build("summary", interactive)

    def _draw_plan(self, fig: Figure) -> None:
        cuts = self.result.cutting_plan
        ax = fig.subplots()

        if not cuts:
            ax.axis('off')
            ax.text(0.5, 0.5, "Nenhum corte para visualizar", ha='center', va='center')
            return

        for row, cut in enumerate(cuts):
            left = 0
            for size, blocks in cut.blocks.items():
                if blocks <= 0:
                    continue
                ax.barh(row, blocks, left=left, color=self.colors.get(size),
                        edgecolor='black', linewidth=1)
                ax.text(left + blocks / 2, row, f"{size} x{blocks}",
                        ha='center', va='center', fontsize=8)
                left += blocks

            # Altura do enfesto ao final da barra
            ax.text(left + 0.1, row, f"altura {cut.stack_size}",
                    va='center', fontsize=8, color='dimgray')

        ax.set_yticks(range(len(cuts)))
        ax.set_yticklabels([f"Corte {cut.cut_number}" for cut in cuts])
        ax.invert_yaxis()
        ax.set_xlabel("Blocos")
        ax.set_title(
            f"Plano de corte - {self.result.total_cuts} cortes, "
            f"desperdício {self.result.total_waste} peças"
        )
        ax.grid(True, axis='x', alpha=0.3)

        fig.tight_layout()

    def _draw_summary(self, fig: Figure) -> None:
        ((ax1, ax2), (ax3, ax4)) = fig.subplots(2, 2)
        checks = self.result.production_verification
        sizes = [check.size for check in checks]

        # Gráfico 1: Pedido x produzido por tamanho
        x = np.arange(len(sizes))
        ax1.bar(x - 0.2, [c.ordered for c in checks], 0.4, label='Pedido', color='skyblue', edgecolor='navy')
        ax1.bar(x + 0.2, [c.produced for c in checks], 0.4, label='Produzido', color='orange', edgecolor='black')
        ax1.set_xticks(x)
        ax1.set_xticklabels(sizes)
        ax1.set_title('Pedido x Produzido')
        ax1.set_ylabel('Peças')
        ax1.legend()

        # Gráfico 2: Distribuição do desperdício
        waste = [max(0, c.surplus) for c in checks]
        if sum(waste) > 0:
            ax2.pie(waste, labels=sizes, autopct='%1.1f%%', startangle=90,
                    colors=[self.colors.get(size) for size in sizes])
        else:
            ax2.axis('off')
            ax2.text(0.5, 0.5, "Sem desperdício", ha='center', va='center', fontsize=14)
        ax2.set_title('Distribuição do Desperdício')

        # Gráfico 3: Aproveitamento
        labels = ['Blocos', 'Enfesto', 'Tecido']
        values = [
            self.result.block_utilization_percent,
            self.result.stack_utilization_percent,
            self.result.cloth_efficiency_percent,
        ]
        bars = ax3.bar(labels, values, color='lightgreen', edgecolor='darkgreen')
        ax3.set_ylim(0, 110)
        ax3.set_ylabel('Aproveitamento (%)')
        ax3.set_title('Aproveitamento')
        for bar, value in zip(bars, values):
            ax3.text(bar.get_x() + bar.get_width() / 2., bar.get_height() + 1,
                     f'{value}%', ha='center', va='bottom')

        # Gráfico 4: Resumo geral
        ax4.axis('off')
        summary_text = f"""
        RESUMO DO PLANO

        Peças Pedidas: {self.result.total_order_quantity}
        Cortes: {self.result.total_cuts}
        Desperdício Total: {self.result.total_waste} peças
        Prioridade: {self.result.priority.value}
        Tempo de Processamento: {self.result.processing_time:.1f} ms
        """
        ax4.text(0.1, 0.9, summary_text, transform=ax4.transAxes, fontsize=12,
                 verticalalignment='top', fontfamily='monospace',
                 bbox=dict(boxstyle="round,pad=0.5", facecolor='lightblue', alpha=0.8))

        fig.tight_layout()

    def plot_cutting_plan(self, save_path: Optional[str] = None, show: bool = False) -> None:
        """Plota o plano de corte"""
        self._finish(self.build_plan_figure(interactive=show), save_path, show)

    def create_summary_chart(self, save_path: Optional[str] = None, show: bool = False) -> None:
        """Cria gráfico de resumo da otimização"""
        self._finish(self.build_summary_figure(interactive=show), save_path, show)

    def render_png(self, chart: str = "plan") -> bytes:
        """
        Renderiza um gráfico em PNG

        A figura não é registrada no pyplot, então pode ser chamada
        de várias threads ao mesmo tempo.

        Args:
            chart: "plan" ou "summary"

        Returns:
            Conteúdo da imagem PNG
        """
        buffer = io.BytesIO()
        fig = self._build(chart, interactive=False)
        try:
            fig.savefig(buffer, format='png', dpi=100, bbox_inches='tight')
        finally:
            self._release(fig)
        return buffer.getvalue()

    def _finish(self, fig: Figure, save_path: Optional[str], show: bool) -> None:
        try:
            if save_path:
                fig.savefig(save_path, dpi=300, bbox_inches='tight')

            if show:
                plt.show()
        finally:
            self._release(fig)

    def _release(self, fig: Figure) -> None:
        """Fecha a figura se ela pertencer ao pyplot"""
        if fig.canvas.manager is not None:
            plt.close(fig)
        else:
            fig.clear()


class LayPlanReporter:
    """Classe para geração de relatórios"""

    def __init__(self, result: OptimizationResult):
        """
        Inicializa o gerador de relatórios

        Args:
            result: Resultado da otimização
        """
        self.result = result

    def cuts_frame(self) -> pd.DataFrame:
        """Uma linha por tamanho em cada corte"""
        rows = []
        for cut in self.result.cutting_plan:
            for size, blocks in cut.blocks.items():
                rows.append({
                    'Corte': cut.cut_number,
                    'Tamanho': size,
                    'Blocos': blocks,
                    'Altura_Enfesto': cut.stack_size,
                    'Peças': blocks * cut.stack_size,
                })
        return pd.DataFrame(rows, columns=['Corte', 'Tamanho', 'Blocos', 'Altura_Enfesto', 'Peças'])

    def sizes_frame(self) -> pd.DataFrame:
        """Verificação de produção por tamanho"""
        rows = [
            {
                'Tamanho': check.size,
                'Pedido': check.ordered,
                'Produzido': check.produced,
                'Excedente': check.surplus,
                'Atendido': check.fulfilled,
                'Cortes': len(self._cuts_of(check.size)),
            }
            for check in self.result.production_verification
        ]
        return pd.DataFrame(rows, columns=['Tamanho', 'Pedido', 'Produzido', 'Excedente', 'Atendido', 'Cortes'])

    def _cuts_of(self, size: str) -> List[int]:
        for entry in self.result.summary:
            if entry.size == size:
                return [ref.cut_number for ref in entry.cuts]
        return []

    def generate_text_report(self) -> str:
        """Gera relatório em formato texto"""
        report = []
        report.append("=" * 60)
        report.append("RELATÓRIO DO PLANO DE CORTE")
        report.append("=" * 60)
        report.append("")

        # Resumo geral
        report.append("RESUMO GERAL:")
        report.append(f"  • Peças Pedidas: {self.result.total_order_quantity}")
        report.append(f"  • Cortes: {self.result.total_cuts}")
        report.append(f"  • Desperdício Total: {self.result.total_waste} peças")
        report.append(f"  • Aproveitamento de Blocos: {self.result.block_utilization_percent}%")
        report.append(f"  • Aproveitamento do Enfesto: {self.result.stack_utilization_percent}%")
        report.append(f"  • Eficiência do Tecido: {self.result.cloth_efficiency_percent}%")
        report.append(f"  • Prioridade: {self.result.priority.value}")
        report.append(f"  • Tempo de Processamento: {self.result.processing_time:.1f} ms")
        report.append("")

        # Detalhes por corte
        report.append("CORTES:")
        report.append("-" * 40)

        for cut in self.result.cutting_plan:
            blocks = ", ".join(f"{size} x{count}" for size, count in cut.blocks.items())
            report.append(f"  {cut.cut_number}. Altura {cut.stack_size}: {blocks}")

        # Verificação por tamanho
        report.append("\nPRODUÇÃO POR TAMANHO:")
        report.append("-" * 30)
        for check in self.result.production_verification:
            status = "OK" if check.fulfilled else "FALTA"
            report.append(
                f"  • {check.size}: pedido {check.ordered}, produzido {check.produced} "
                f"(excedente {check.surplus}) [{status}]"
            )

        report.append("\n" + "=" * 60)

        return "\n".join(report)

    def generate_csv_report(self, file_path: Optional[str] = None) -> Dict[str, str]:
        """
        Gera relatório em formato CSV

        Args:
            file_path: Caminho base; se informado grava <base>_cortes.csv e <base>_tamanhos.csv

        Returns:
            Conteúdo CSV por nome de tabela
        """
        frames = {
            "cortes": self.cuts_frame(),
            "tamanhos": self.sizes_frame(),
        }
        contents = {name: frame.to_csv(index=False) for name, frame in frames.items()}

        if file_path:
            for name, frame in frames.items():
                frame.to_csv(f"{file_path}_{name}.csv", index=False, encoding='utf-8')

        return contents

    def generate_json_report(self, file_path: Optional[str] = None) -> str:
        """Gera relatório em formato JSON"""
        content = self.result.model_dump_json(by_alias=True, indent=2)

        if file_path:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)

        return content

    def generate_html_report(self, file_path: Optional[str] = None) -> str:
        """Gera relatório em formato HTML"""
        cuts_table = self.cuts_frame().to_html(index=False, classes="cuts", border=0)
        sizes_table = self.sizes_frame().to_html(index=False, classes="sizes", border=0)

        page = f"""
        <!DOCTYPE html>
        <html lang="pt-BR">
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
            <title>Plano de Corte - LayPlanner</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 20px; }}
                .header {{ background-color: #2c3e50; color: white; padding: 20px; text-align: center; }}
                .summary {{ background-color: #ecf0f1; padding: 15px; margin: 20px 0; border-radius: 5px; }}
                .metric {{ display: inline-block; margin: 10px; padding: 10px; background-color: white; border-radius: 5px; }}
                .metric-value {{ font-size: 24px; font-weight: bold; color: #2c3e50; }}
                .metric-label {{ font-size: 12px; color: #7f8c8d; }}
                table {{ border-collapse: collapse; margin: 10px 0; }}
                th, td {{ padding: 6px 12px; border-bottom: 1px solid #ddd; text-align: left; }}
            </style>
        </head>
        <body>
            <div class="header">
                <h1>✂️ LayPlanner - Plano de Corte</h1>
                <p>Relatório gerado automaticamente pelo planejador de enfesto</p>
            </div>

            <div class="summary">
                <h2>📊 Resumo Geral</h2>
                <div class="metric">
                    <div class="metric-value">{self.result.total_cuts}</div>
                    <div class="metric-label">Cortes</div>
                </div>
                <div class="metric">
                    <div class="metric-value">{self.result.total_waste}</div>
                    <div class="metric-label">Desperdício (peças)</div>
                </div>
                <div class="metric">
                    <div class="metric-value">{self.result.block_utilization_percent}%</div>
                    <div class="metric-label">Aproveitamento de Blocos</div>
                </div>
                <div class="metric">
                    <div class="metric-value">{self.result.stack_utilization_percent}%</div>
                    <div class="metric-label">Aproveitamento do Enfesto</div>
                </div>
                <div class="metric">
                    <div class="metric-value">{self.result.cloth_efficiency_percent}%</div>
                    <div class="metric-label">Eficiência do Tecido</div>
                </div>
                <p><strong>Prioridade:</strong> {html.escape(self.result.priority.value)} |
                   <strong>Peças pedidas:</strong> {self.result.total_order_quantity}</p>
            </div>

            <h2>📋 Cortes</h2>
            {cuts_table}

            <h2>📦 Produção por Tamanho</h2>
            {sizes_table}

            <div style="text-align: center; margin-top: 40px; color: #7f8c8d;">
                <p>Relatório gerado pelo LayPlanner - Planejamento de Enfesto e Corte</p>
                <p>Data: {pd.Timestamp.now().strftime("%d/%m/%Y %H:%M:%S")}</p>
            </div>
        </body>
        </html>
        """

        if file_path:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(page)

        return page


def export_result(result: OptimizationResult, output_dir: str, formats: List[str] = None) -> None:
    """
    Exporta resultado em múltiplos formatos

    Args:
        result: Resultado da otimização
        output_dir: Diretório de saída
        formats: Lista de formatos (txt, csv, json, html)
    """
    if formats is None:
        formats = ["txt", "csv", "json", "html"]

    # Criar diretório se não existir
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    reporter = LayPlanReporter(result)
    base_path = Path(output_dir) / "plano_de_corte"

    if "txt" in formats:
        with open(f"{base_path}.txt", 'w', encoding='utf-8') as f:
            f.write(reporter.generate_text_report())

    if "csv" in formats:
        reporter.generate_csv_report(str(base_path))

    if "json" in formats:
        reporter.generate_json_report(f"{base_path}.json")

    if "html" in formats:
        reporter.generate_html_report(f"{base_path}.html")

    logger.info("Relatórios exportados para: %s", output_dir)


def create_visualization(result: OptimizationResult, output_dir: str, show: bool = False) -> None:
    """
    Cria visualizações do resultado

    Args:
        result: Resultado da otimização
        output_dir: Diretório de saída
        show: Se deve mostrar os gráficos
    """
    # Criar diretório se não existir
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    visualizer = LayPlanVisualizer(result)
    base_path = Path(output_dir) / "visualizacao_plano"

    visualizer.plot_cutting_plan(f"{base_path}_cortes.png", show=show)
    visualizer.create_summary_chart(f"{base_path}_resumo.png", show=show)

    logger.info("Visualizações salvas em: %s", output_dir)
