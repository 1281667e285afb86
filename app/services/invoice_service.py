"""Invoice PDF rendering for completed payments."""

import io
import logging
from decimal import Decimal

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import InvalidTransition
from app.models.appointment import Appointment
from app.models.payment import Payment, PaymentStatus
from app.models.user import User

logger = logging.getLogger(__name__)


class InvoiceGenerator:
    """Renders one payment, with its appointment, customer and property, to PDF."""

    def __init__(self, payment: Payment, customer: User, appointment: Appointment | None):
        if payment.status != PaymentStatus.COMPLETED:
            raise InvalidTransition(
                "Invoice is only available for completed payments",
                current_status=payment.status.value,
            )
        self.payment = payment
        self.customer = customer
        self.appointment = appointment

        self.margin = 0.75 * inch
        self.brand_color = colors.HexColor("#2E7D32")
        self.dark_gray = colors.HexColor("#1e293b")
        self.light_gray = colors.HexColor("#f1f5f9")

    def _line_items(self) -> list[list[str]]:
        rows = [["Description", "Qty", "Unit Price", "Amount"]]
        if self.appointment is None:
            rows.append(["Lawn care service", "1", f"${self.payment.amount}", f"${self.payment.amount}"])
            return rows

        package_name = self.appointment.service_package.name if self.appointment.service_package else "Service"
        rows.append([
            f"{package_name} ({self.appointment.frequency.value})",
            "1",
            f"${self.appointment.package_price}",
            f"${self.appointment.package_price}",
        ])
        for line in self.appointment.add_ons:
            name = line.service.name if line.service else "Add-on"
            amount = Decimal(line.price) * line.quantity
            rows.append([name, str(line.quantity), f"${line.price}", f"${amount:.2f}"])
        return rows

    def generate(self) -> bytes:
        """Generate PDF and return bytes"""
        logger.info("Generating invoice PDF for payment %s", self.payment.id)

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Invoice {self.payment.invoice_number}",
        )

        story = []
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontSize=24,
            textColor=self.brand_color,
            spaceAfter=12,
        )
        body_style = ParagraphStyle(
            "InvoiceBody",
            parent=styles["Normal"],
            fontSize=10,
            textColor=self.dark_gray,
            spaceAfter=6,
        )

        story.append(Paragraph(settings.SENDGRID_FROM_NAME, title_style))
        story.append(Paragraph("INVOICE", body_style))
        story.append(Spacer(1, 0.3 * inch))

        info_data = [
            ["Invoice #:", self.payment.invoice_number or ""],
            ["Date Paid:", self.payment.paid_at.strftime("%B %d, %Y") if self.payment.paid_at else ""],
            ["Bill To:", self.customer.full_name],
            ["Email:", self.customer.email],
        ]
        if self.appointment is not None:
            prop = self.appointment.property
            info_data.append(["Service Address:", f"{prop.address}, {prop.city}, {prop.state} {prop.zip_code}"])
            info_data.append(["Service Date:", self.appointment.scheduled_date.strftime("%B %d, %Y")])
        if self.payment.card_brand and self.payment.last4:
            info_data.append(["Paid With:", f"{self.payment.card_brand.title()} ending in {self.payment.last4}"])

        info_table = Table(info_data, colWidths=[1.5 * inch, 4.5 * inch])
        info_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 10),
                    ("FONT", (1, 0), (1, -1), "Helvetica", 10),
                    ("TEXTCOLOR", (0, 0), (-1, -1), self.dark_gray),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        story.append(info_table)
        story.append(Spacer(1, 0.4 * inch))

        items = self._line_items()
        items.append(["", "", "Total", f"${self.payment.amount}"])
        items_table = Table(items, colWidths=[3.3 * inch, 0.7 * inch, 1.2 * inch, 1.3 * inch], repeatRows=1)
        items_table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
                    ("FONT", (0, 1), (-1, -2), "Helvetica", 9),
                    ("FONT", (0, -1), (-1, -1), "Helvetica-Bold", 10),
                    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -2), [colors.white, self.light_gray]),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, self.dark_gray),
                    ("GRID", (0, 0), (-1, -2), 0.5, colors.grey),
                    ("TOPPADDING", (0, 0), (-1, -1), 6),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        story.append(items_table)

        story.append(Spacer(1, 0.4 * inch))
        story.append(Paragraph("<i>Thank you for your business!</i>", body_style))

        doc.build(story)
        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes


async def render_invoice(db: AsyncSession, payment: Payment) -> bytes:
    """Load the rest of the invoice aggregate and render it."""
    if payment.status != PaymentStatus.COMPLETED:
        raise InvalidTransition(
            "Invoice is only available for completed payments",
            current_status=payment.status.value,
        )
    customer = (await db.execute(select(User).where(User.id == payment.user_id))).scalar_one()
    appointment = None
    if payment.appointment_id:
        result = await db.execute(select(Appointment).where(Appointment.id == payment.appointment_id))
        appointment = result.scalar_one_or_none()
    return InvoiceGenerator(payment, customer, appointment).generate()
