# sew4mi/utils/pdf_generators/escrow_statement_pdf.py
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

from sew4mi.models.orders.order_models import Order
from sew4mi.utils.datetime_utils import ensure_utc, utcnow


def _ghs(amount) -> str:
    return f"GHS {float(amount or 0):,.2f}"


def generate_escrow_statement_pdf(order: Order, transactions) -> bytes:
    """
    Render the escrow ledger of one order. Built in memory; nothing is
    written to disk.
    """
    buffer = BytesIO()
    styles = getSampleStyleSheet()
    story = []

    # -----------------------------
    # HEADER
    # -----------------------------
    story.append(Paragraph(f"<b>ESCROW STATEMENT #{order.order_number}</b>", styles["Title"]))
    story.append(Spacer(1, 8))
    story.append(Paragraph(f"Garment: {order.garment_type}", styles["Normal"]))
    story.append(Paragraph(f"Order status: {order.status.value}", styles["Normal"]))
    story.append(Paragraph(f"Escrow stage: {order.escrow_stage.value}", styles["Normal"]))
    story.append(Paragraph(f"Generated: {utcnow().strftime('%d-%m-%Y %H:%M')} UTC", styles["Normal"]))
    story.append(Spacer(1, 15))

    # -----------------------------
    # SPLIT
    # -----------------------------
    story.append(Paragraph("<b>Payment Schedule:</b>", styles["Heading3"]))
    schedule = Table(
        [
            ["Stage", "Due", "Paid"],
            ["Deposit (25%)", _ghs(order.deposit_amount), _ghs(order.deposit_paid)],
            ["Fitting (50%)", _ghs(order.fitting_amount), _ghs(order.fitting_paid)],
            ["Final (25%)", _ghs(order.final_amount), _ghs(order.final_paid)],
            ["Total", _ghs(order.total_amount), _ghs(order.deposit_paid + order.fitting_paid + order.final_paid)],
        ],
        colWidths=[160, 120, 120],
    )
    schedule.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
    ]))
    story.append(schedule)
    story.append(Spacer(1, 20))

    # -----------------------------
    # LEDGER
    # -----------------------------
    story.append(Paragraph("<b>Transactions:</b>", styles["Heading3"]))
    rows = [["Date", "Type", "From", "To", "Amount"]]
    for tx in transactions:
        created = ensure_utc(tx.created_at)
        rows.append([
            created.strftime("%d-%m-%Y") if created else "",
            tx.transaction_type.value,
            tx.from_stage.value if tx.from_stage else "-",
            tx.to_stage.value,
            _ghs(tx.amount),
        ])
    if len(rows) == 1:
        rows.append(["-", "No movements yet", "", "", ""])

    ledger = Table(rows, colWidths=[80, 120, 70, 80, 100])
    ledger.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
    ]))
    story.append(ledger)
    story.append(Spacer(1, 20))

    story.append(Paragraph(f"Refunded: {_ghs(order.refunded_amount)}", styles["Normal"]))
    story.append(Paragraph(f"<b>Escrow Balance: {_ghs(order.escrow_balance)}</b>", styles["Heading2"]))

    doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"Escrow {order.order_number}")
    doc.build(story)

    return buffer.getvalue()
