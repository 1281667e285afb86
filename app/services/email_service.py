"""Email notification service using SendGrid."""

import logging
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Email service for sending customer notifications."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.SENDGRID_API_KEY
        self.from_email = settings.SENDGRID_FROM_EMAIL
        self.from_name = settings.SENDGRID_FROM_NAME

        if not self.api_key:
            logger.warning("SENDGRID_API_KEY not configured. Emails will not be sent.")
            self.client = None
            self.enabled = False
        else:
            self.client = SendGridAPIClient(self.api_key)
            self.enabled = True
            logger.info("Email service initialized successfully")

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        plain_body: Optional[str] = None,
    ) -> bool:
        """
        Send an email.

        Delivery is best-effort: failures are logged and reported as False,
        never raised to the caller.

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.enabled:
            logger.info("Email service disabled. Would have sent to %s: %s", to, subject)
            return False

        try:
            message = Mail(
                from_email=(self.from_email, self.from_name),
                to_emails=to,
                subject=subject,
                html_content=html_body,
            )

            if plain_body:
                message.plain_text_content = plain_body

            response = self.client.send(message)

            if 200 <= response.status_code < 300:
                logger.info("Email sent successfully to %s: %s", to, subject)
                return True
            logger.error("Failed to send email to %s: %s %s", to, response.status_code, response.body)
            return False

        except Exception as e:
            logger.error("Error sending email to %s: %s", to, e)
            return False

    async def send_booking_confirmation(self, appointment, customer, property, package) -> bool:
        """
        Send booking confirmation to the customer.

        Args:
            appointment: The newly created Appointment
            customer: The booking User
            property: The serviced Property
            package: The booked ServicePackage
        """
        subject = f"Your {package.name} service is booked"
        when = f"{appointment.scheduled_date.strftime('%A, %B %d, %Y')} at {appointment.scheduled_time}"
        where = f"{property.address}, {property.city}, {property.state} {property.zip_code}"
        add_on_rows = "".join(
            f"<li>{line.service.name if line.service else line.service_id} x{line.quantity}: ${line.price}</li>"
            for line in appointment.add_ons
        )
        add_on_html = f"<p><strong>Add-ons:</strong></p><ul>{add_on_rows}</ul>" if add_on_rows else ""

        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                    <h2 style="color: #2E7D32;">Booking Confirmed</h2>

                    <p>Hi {customer.full_name},</p>

                    <p>Thanks for booking with {self.from_name}. Here are your details:</p>

                    <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
                        <p><strong>Service:</strong> {package.name}</p>
                        <p><strong>When:</strong> {when}</p>
                        <p><strong>Where:</strong> {where}</p>
                        <p><strong>Frequency:</strong> {appointment.frequency.value}</p>
                        {add_on_html}
                        <p><strong>Total:</strong> ${appointment.total_price}</p>
                    </div>

                    <p>
                        <a href="{settings.FRONTEND_URL}/dashboard"
                           style="display: inline-block; padding: 12px 24px; background-color: #2E7D32;
                                  color: white; text-decoration: none; border-radius: 5px;">
                            Manage Your Bookings
                        </a>
                    </p>

                    <p style="color: #666; font-size: 14px; margin-top: 40px;">
                        Need to reschedule? Reply to this email or visit your dashboard.
                    </p>
                </div>
            </body>
        </html>
        """

        plain_body = f"""
        Booking Confirmed

        Hi {customer.full_name},

        Service: {package.name}
        When: {when}
        Where: {where}
        Frequency: {appointment.frequency.value}
        Total: ${appointment.total_price}

        Manage your bookings: {settings.FRONTEND_URL}/dashboard
        """

        return await self.send_email(customer.email, subject, html_body, plain_body)

    async def send_payment_receipt(self, customer, payment) -> bool:
        """Send a receipt once a payment completes."""
        subject = f"Payment received - Invoice {payment.invoice_number}"
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                    <h2 style="color: #2E7D32;">Payment Received</h2>
                    <p>Hi {customer.full_name},</p>
                    <p>We received your payment of <strong>${payment.amount}</strong>.</p>
                    <p>Invoice number: {payment.invoice_number}</p>
                    <p>You can download the invoice from your dashboard.</p>
                </div>
            </body>
        </html>
        """
        plain_body = (
            f"Hi {customer.full_name},\n\nWe received your payment of ${payment.amount}.\n"
            f"Invoice number: {payment.invoice_number}\n"
        )
        return await self.send_email(customer.email, subject, html_body, plain_body)

    async def send_quote_response(self, quote) -> bool:
        """Tell the requester their quote has been answered."""
        subject = "Your lawn care quote is ready"
        price_line = f"Estimated price: ${quote.estimated_price}" if quote.estimated_price is not None else ""
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                    <h2 style="color: #2E7D32;">Your Quote</h2>
                    <p>Hi {quote.first_name},</p>
                    <p>We reviewed your request for {quote.service_type} at {quote.address}.</p>
                    <p><strong>{price_line}</strong></p>
                    <p>{quote.admin_notes or ""}</p>
                </div>
            </body>
        </html>
        """
        plain_body = f"Hi {quote.first_name},\n\n{price_line}\n{quote.admin_notes or ''}\n"
        return await self.send_email(quote.email, subject, html_body, plain_body)


# Global email service instance
email_service = EmailService()


def get_email_service() -> EmailService:
    """FastAPI dependency returning the process email service."""
    return email_service
