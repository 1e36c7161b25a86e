"""
Utility functions for formatting text-based reports and tables.

Used by the command-line scripts to print ATS and validation reports;
format_ats_report assembles the full ATS report from an optimization result.
"""

from typing import Any, List


class Column:
    """Column definition for table formatting."""

    def __init__(self, name: str, width: int, align: str = "<"):
        """
        Args:
            name: Column header name
            width: Column width in characters
            align: Alignment ('<' left, '>' right, '^' center)
        """
        self.name = name
        self.width = width
        self.align = align

    def format_header(self) -> str:
        return f"{self.name:{self.align}{self.width}}"

    def format_value(self, value: Any) -> str:
        # Floats are shown with one decimal so score columns line up
        if isinstance(value, float):
            value = f"{value:.1f}"
        return f"{str(value)[: self.width]:{self.align}{self.width}}"


class TableFormatter:
    """Builder for formatted text tables with aligned columns."""

    def __init__(self, columns: List[Column], total_width: int = 80):
        self.columns = columns
        self.total_width = total_width
        self.lines: List[str] = []

    def add_section_header(self, title: str) -> "TableFormatter":
        """Add section title framed by '=' separator lines."""
        self.lines.append("=" * self.total_width)
        self.lines.append(title)
        self.lines.append("=" * self.total_width)
        return self

    def add_table_header(self) -> "TableFormatter":
        self.lines.append(" ".join(col.format_header() for col in self.columns))
        self.lines.append("-" * self.total_width)
        return self

    def add_row(self, values: List[Any]) -> "TableFormatter":
        """
        Add data row with column values.

        Raises:
            ValueError: If number of values doesn't match columns
        """
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}")

        self.lines.append(" ".join(col.format_value(v) for col, v in zip(self.columns, values)))
        return self

    def add_text(self, text: str) -> "TableFormatter":
        self.lines.append(text)
        return self

    def render(self) -> str:
        return "\n".join(self.lines)


def format_score_bar(score: float, width: int = 20) -> str:
    """
    Render a 0-100 score as a fixed-width text bar.

    Args:
        score: Score in [0, 100] (values outside are clamped)
        width: Number of bar cells

    Returns:
        Bar string, e.g. "[##########----------]"
    """
    clamped = max(0.0, min(100.0, score))
    filled = round(clamped / 100 * width)
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def _breakdown_table(result) -> TableFormatter:
    table = TableFormatter([Column("Category", 16), Column("Score", 7, ">"), Column("", 24)])
    table.add_section_header(
        f"ATS SCORE: {result.overall_score:.2f} {format_score_bar(result.overall_score)}"
    )
    table.add_table_header()
    for name, score in vars(result.score_breakdown).items():
        table.add_row([name.capitalize(), float(score), format_score_bar(score)])
    return table


def _systems_table(compatibility) -> TableFormatter:
    verdict = "parsing guaranteed" if compatibility.guaranteed_parsing else "parsing not guaranteed"
    table = TableFormatter(
        [Column("System", 16), Column("Share", 7, ">"), Column("Score", 7, ">"), Column("Issues", 45)]
    )
    table.add_section_header(f"COMPATIBILITY: {compatibility.overall_compatibility:.1f} ({verdict})")
    table.add_table_header()
    for system in compatibility.systems:
        table.add_row(
            [
                system.name,
                f"{system.market_share:.0%}",
                float(system.compatibility),
                "; ".join(system.specific_issues) or "-",
            ]
        )
    return table


def format_ats_report(result) -> str:
    """
    Plain-text ATS report: score breakdown, per-system compatibility,
    warnings, optimizations and the benchmark comparison.

    Args:
        result: ATSOptimizationResult from ATSOptimizer.optimize_for_ats

    Returns:
        Multi-line report; empty warning and optimization sections are omitted
    """
    blocks = [_breakdown_table(result).render(), _systems_table(result.compatibility).render()]

    if result.warnings:
        table = TableFormatter([]).add_section_header("WARNINGS")
        for warning in result.warnings:
            table.add_text(f"  [{warning.severity}] {warning.message} → {warning.resolution}")
        blocks.append(table.render())

    if result.optimizations:
        table = TableFormatter([]).add_section_header("OPTIMIZATIONS")
        for optimization in result.optimizations:
            table.add_text(
                f"  [{optimization.priority}] {optimization.description} "
                f"(+{optimization.impact}): {optimization.action}"
            )
        blocks.append(table.render())

    benchmark = result.benchmark_comparison
    table = TableFormatter([]).add_section_header("BENCHMARK")
    table.add_text(
        f"  Industry average {benchmark.industry_average}, "
        f"top performers {benchmark.top_performers}, percentile {benchmark.percentile:.0f}"
    )
    for improvement in benchmark.improvements:
        table.add_text(f"  - {improvement}")
    blocks.append(table.render())

    return "\n\n".join(blocks)
