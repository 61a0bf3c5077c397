"""PDF rendering helpers for the ElectrifyLab report.

These utilities centralize layout for the one-page summary so the report
page and the download handler share the same rendering.
"""

from typing import List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from services.analysis_pipeline import ProjectAnalysis
from utils.insights import build_report_insights

_CARD_FILL = (245, 248, 255)


def _draw_metric_card(
    pdf: FPDF,
    x: float,
    y: float,
    w: float,
    h: float,
    title: str,
    value: str,
    subtitle: str,
    fill_rgb: Tuple[int, int, int],
) -> None:
    pdf.set_fill_color(*fill_rgb)
    pdf.set_draw_color(230, 232, 235)
    pdf.rect(x, y, w, h, style="DF")
    pdf.set_xy(x + 2, y + 2)
    pdf.set_text_color(50, 50, 50)
    pdf.set_font("Helvetica", "B", 9)
    pdf.cell(w - 4, 5, title)

    pdf.set_xy(x + 2, y + 9)
    pdf.set_font("Helvetica", "", 12)
    pdf.set_text_color(15, 15, 15)
    pdf.cell(w - 4, 7, value)

    pdf.set_xy(x + 2, y + h - 6)
    pdf.set_font("Helvetica", "", 7)
    pdf.set_text_color(80, 80, 80)
    pdf.cell(w - 4, 4, subtitle)
    pdf.set_text_color(0, 0, 0)


def _draw_section_header(pdf: FPDF, title: str, margin: float, usable_width: float) -> None:
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(20, 20, 20)
    pdf.cell(0, 7, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(220, 223, 228)
    pdf.line(margin, pdf.get_y(), margin + usable_width, pdf.get_y())
    pdf.ln(2)


def _draw_table(
    pdf: FPDF,
    x: float,
    col_widths: List[float],
    rows: List[List[str]],
    font_size: int = 8,
) -> float:
    """Render a simple table and return the bottom y position."""
    pdf.set_x(x)
    pdf.set_font("Helvetica", "B", font_size)
    pdf.set_fill_color(*_CARD_FILL)
    pdf.set_draw_color(220, 223, 228)
    for idx, cell in enumerate(rows[0]):
        pdf.cell(col_widths[idx], 5.5, cell, border=1, fill=True)
    pdf.ln(5.5)
    pdf.set_font("Helvetica", "", font_size)
    pdf.set_fill_color(255, 255, 255)
    for row in rows[1:]:
        pdf.set_x(x)
        for idx, cell in enumerate(row):
            pdf.cell(col_widths[idx], 5.5, cell, border=1, fill=True)
        pdf.ln(5.5)
    return pdf.get_y()


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def _format_optional(value: Optional[float], suffix: str = "") -> str:
    if value is None:
        return "N/A"
    return f"{value:,.1f}{suffix}"


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1.
    return text.encode("latin-1", "replace").decode("latin-1")


def build_pdf_summary(analysis: ProjectAnalysis) -> bytes:
    """Return a one-page PDF summary of the analysis."""

    state = analysis.state
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=12)
    pdf.add_page()
    margin = 12.0
    pdf.set_margins(margin, margin, margin)
    usable_width = pdf.w - 2 * margin

    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 9, "Electrification Plan Summary", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 9)
    address = " ".join(p for p in (state.address_number, state.street_name, state.town) if p)
    pdf.cell(
        0,
        5,
        _latin1(f"{address or 'Unnamed project'} | {state.facility_type.value} | {state.climate_zone.value}"),
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.ln(2)

    if analysis.is_empty:
        pdf.set_font("Helvetica", "", 10)
        pdf.multi_cell(0, 5, build_report_insights(analysis)[0])
        return bytes(pdf.output())

    card_w = (usable_width - 6) / 4
    card_h = 20.0
    y = pdf.get_y()
    cards = [
        ("Net cost", f"{_money(analysis.cost.net_low)} - {_money(analysis.cost.net_high)}",
         f"Rebates {_money(analysis.cost.total_rebates)}"),
        ("Annual savings", _money(analysis.financial.net_annual_savings),
         f"Payback {_format_optional(analysis.financial.simple_payback_years, ' yrs')}"),
        ("15-year savings", _money(analysis.lifetime.total_savings_15yr),
         f"High-risk gas {_money(analysis.lifetime.total_high_risk_savings_15yr)}"),
        ("CO2e avoided / yr", f"{analysis.environmental.annual_ghg_reduction_co2e100_kg:,.0f} kg",
         f"20-yr GWP {analysis.environmental.annual_ghg_reduction_co2e20_kg:,.0f} kg"),
    ]
    for idx, (title, value, subtitle) in enumerate(cards):
        _draw_metric_card(pdf, margin + idx * (card_w + 2), y, card_w, card_h, title, value, subtitle, _CARD_FILL)
    pdf.set_xy(margin, y + card_h + 4)

    _draw_section_header(pdf, "Recommended equipment", margin, usable_width)
    rec_rows = [["Recommendation", "Peak kW", "Amps"]]
    rec_rows += [[_latin1(r.text), f"{r.kw:,.1f}", f"{r.amps:,.1f}"] for r in analysis.planning.recommendations]
    _draw_table(pdf, margin, [usable_width * 0.6, usable_width * 0.2, usable_width * 0.2], rec_rows)
    pdf.ln(1)
    pdf.set_font("Helvetica", "", 8)
    pdf.cell(
        0,
        5,
        f"Main panel: {analysis.planning.panel_status}. Breaker spaces: {analysis.planning.breaker_status.value}.",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.ln(2)

    _draw_section_header(pdf, "Cost estimate", margin, usable_width)
    cost_rows = [["Item", "Low", "Medium", "High"]]
    for item in analysis.cost.all_items:
        cost_rows.append([_latin1(item.name), _money(item.low), _money(item.medium), _money(item.high)])
    for rebate in analysis.cost.rebates:
        cost_rows.append([_latin1(rebate.name), *([_money(-rebate.amount)] * 3)])
    cost_rows.append(
        ["Net cost", _money(analysis.cost.net_low), _money(analysis.cost.net_medium), _money(analysis.cost.net_high)]
    )
    widths = [usable_width * 0.46] + [usable_width * 0.18] * 3
    _draw_table(pdf, margin, widths, cost_rows)
    pdf.ln(3)

    _draw_section_header(pdf, "Guidance", margin, usable_width)
    pdf.set_font("Helvetica", "", 8)
    for line in build_report_insights(analysis):
        pdf.multi_cell(0, 4, _latin1(f"- {line}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.ln(2)
    pdf.set_text_color(90, 90, 90)
    pdf.multi_cell(
        0,
        4,
        "Planning-grade estimate from market-average costs. Confirm sizing with a Manual J load calculation "
        "and pricing with installer quotes.",
    )
    return bytes(pdf.output())
