# Overview: PDF invoices and receipts for orders, drawn with reportlab.

"""
Document layout

Every document shares one header (shop name + title), a customer block on
the left, a money block on the right and a line-item table. Documents are
rendered from order snapshots (plain dicts from to_dict()), never from ORM
objects, because they are produced after the request's transaction has
ended and possibly on another thread.

Files:
    invoices/invoice_<order_id>.pdf   regular order invoice
    receipts/booking_<order_id>.pdf   event booking receipt
    receipts/payment_<order_id>.pdf   latest partial-payment receipt
    receipts/final_<order_id>.pdf     event final invoice

Amounts are drawn as "Rs." because the base-14 PDF fonts carry no rupee glyph.
"""

from __future__ import annotations

import os
from datetime import date

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas


W, H = A4
MARGIN = 50

ACCENT = HexColor("#3B82F6")
INK = HexColor("#1F2937")
RULE = HexColor("#D1D5DB")
DUE = HexColor("#EF4444")
SETTLED = HexColor("#22C55E")

# Column x positions for the item table
COL_ITEM = MARGIN
COL_QTY = 250
COL_PRICE = 350
COL_AMOUNT = 450

INVOICES = "invoices"
RECEIPTS = "receipts"


def format_money(cents: int | None) -> str:
    cents = cents or 0
    sign = "-" if cents < 0 else ""
    rupees, paise = divmod(abs(cents), 100)
    return f"{sign}Rs. {rupees:,}.{paise:02d}"


def _format_quantity(quantity) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:g}"


def document_path(documents_dir: str, folder: str, filename: str) -> str:
    target = os.path.join(documents_dir, folder)
    os.makedirs(target, exist_ok=True)
    return os.path.join(target, filename)


class _OrderDocument:
    """Thin wrapper over a reportlab canvas with a moving cursor."""

    def __init__(self, path: str, *, title: str, shop_name: str):
        self.c = canvas.Canvas(path, pagesize=A4)
        self.c.setTitle(title)
        self.c.setAuthor(shop_name)
        self.title = title
        self.shop_name = shop_name
        self.y = H - MARGIN

    def header(self) -> None:
        c = self.c
        c.setFillColor(ACCENT)
        c.rect(MARGIN, self.y - 20, 20, 20, fill=1, stroke=0)
        c.setFillColor(INK)
        c.setFont("Helvetica-Bold", 18)
        c.drawString(MARGIN + 28, self.y - 16, self.shop_name)
        c.setFont("Helvetica-Bold", 20)
        c.drawRightString(W - MARGIN, self.y - 16, self.title)
        self.y -= 60

    def two_column_block(self, left_title: str, left: list[str], right_title: str, right: list[str]) -> None:
        c = self.c
        top = self.y
        c.setFont("Helvetica-Bold", 12)
        c.drawString(MARGIN, top, left_title)
        c.drawRightString(W - MARGIN, top, right_title)
        c.setFont("Helvetica", 10)
        y = top - 18
        for line in left:
            c.drawString(MARGIN, y, line)
            y -= 15
        left_bottom = y
        y = top - 18
        for line in right:
            c.drawRightString(W - MARGIN, y, line)
            y -= 15
        self.y = min(left_bottom, y) - 10

    def emphasis(self, text: str, *, color=INK) -> None:
        c = self.c
        c.setFont("Helvetica-Bold", 12)
        c.setFillColor(color)
        c.drawRightString(W - MARGIN, self.y, text)
        c.setFillColor(INK)
        self.y -= 30

    def items_table(self, items: list[dict]) -> None:
        c = self.c
        c.setFont("Helvetica-Bold", 12)
        c.drawString(COL_ITEM, self.y, "Item")
        c.drawString(COL_QTY, self.y, "Quantity")
        c.drawString(COL_PRICE, self.y, "Price")
        c.drawString(COL_AMOUNT, self.y, "Amount")
        self._rule(self.y - 8)
        self.y -= 26

        c.setFont("Helvetica", 10)
        for item in items:
            if self.y < MARGIN + 40:
                c.showPage()
                c.setFont("Helvetica", 10)
                self.y = H - MARGIN
            c.drawString(COL_ITEM, self.y, str(item.get("name") or ""))
            c.drawString(COL_QTY, self.y, f"{_format_quantity(item['quantity'])} {item.get('unit') or ''}".strip())
            c.drawString(COL_PRICE, self.y, format_money(item["price_cents"]))
            c.drawString(COL_AMOUNT, self.y, format_money(item["line_total_cents"]))
            self.y -= 20
        self._rule(self.y + 8)
        self.y -= 10

    def totals(self, rows: list[tuple[str, str]]) -> None:
        c = self.c
        for label, value in rows:
            c.setFont("Helvetica-Bold" if label.startswith("Total") else "Helvetica", 11)
            c.drawString(COL_PRICE, self.y, label)
            c.drawRightString(W - MARGIN, self.y, value)
            self.y -= 18

    def footer(self, text: str) -> None:
        self.c.setFont("Helvetica-Oblique", 9)
        self.c.drawCentredString(W / 2, MARGIN, text)

    def save(self) -> None:
        self.c.showPage()
        self.c.save()

    def _rule(self, y: float) -> None:
        self.c.setStrokeColor(RULE)
        self.c.line(MARGIN, y, W - MARGIN, y)


def _event_customer_lines(order: dict) -> list[str]:
    return [
        f"Name: {order['customer_name']}",
        f"Phone: {order['phone']}",
        f"Delivery: {order['delivery_date']} ({order['delivery_time']})",
        f"Purpose: {order['purpose']}",
    ]


def render_regular_invoice(order: dict, *, documents_dir: str, shop_name: str) -> str:
    path = document_path(documents_dir, INVOICES, f"invoice_{order['id']}.pdf")
    payment = order["payment"]

    doc = _OrderDocument(path, title="INVOICE", shop_name=shop_name)
    doc.header()
    doc.two_column_block(
        "Bill To",
        [f"Name: {order['customer_name']}", f"Phone: {order['phone']}"],
        "Invoice",
        [
            f"Invoice #: {order['id']}",
            f"Date: {(order.get('order_date') or '')[:10]}",
            f"Paid by: {payment['method']}",
        ],
    )
    doc.items_table(order["items"])
    doc.totals([("Total", format_money(payment["amount_cents"]))])
    doc.footer("Thank you for your purchase!")
    doc.save()
    return path


def render_booking_receipt(order: dict, *, documents_dir: str, shop_name: str) -> str:
    path = document_path(documents_dir, RECEIPTS, f"booking_{order['id']}.pdf")
    balance = order["total_amount_cents"] - order["paid_amount_cents"]

    doc = _OrderDocument(path, title="BOOKING RECEIPT", shop_name=shop_name)
    doc.header()
    doc.two_column_block(
        "Customer Details",
        _event_customer_lines(order),
        "Payment Summary",
        [
            f"Order ID: {order['id']}",
            f"Date: {date.today().isoformat()}",
            f"Total Amount: {format_money(order['total_amount_cents'])}",
            f"Advance Paid: {format_money(order['paid_amount_cents'])}",
        ],
    )
    doc.emphasis(f"Balance: {format_money(balance)}", color=DUE if balance > 0 else SETTLED)
    doc.items_table(order["items"])
    if order.get("discount_cents"):
        doc.totals([("Discount", f"-{format_money(order['discount_cents'])}")])
    doc.footer("Balance is payable on or before delivery.")
    doc.save()
    return path


def render_payment_receipt(order: dict, payment: dict, *, documents_dir: str, shop_name: str) -> str:
    """Receipt for one installment, showing what is still owed."""
    path = document_path(documents_dir, RECEIPTS, f"payment_{order['id']}.pdf")
    balance = order["total_amount_cents"] - order["paid_amount_cents"]

    doc = _OrderDocument(path, title="PAYMENT RECEIPT", shop_name=shop_name)
    doc.header()
    doc.two_column_block(
        "Customer Details",
        _event_customer_lines(order),
        "Payment",
        [
            f"Order ID: {order['id']}",
            f"Received: {format_money(payment['amount_cents'])}",
            f"Method: {payment['method']}",
            f"Date: {(payment.get('paid_at') or '')[:10]}",
        ],
    )
    doc.totals([
        ("Order total", format_money(order["total_amount_cents"])),
        ("Paid to date", format_money(order["paid_amount_cents"])),
    ])
    doc.emphasis(f"Remaining balance: {format_money(balance)}", color=DUE)
    doc.footer("Thank you for your payment.")
    doc.save()
    return path


def render_final_invoice(order: dict, *, documents_dir: str, shop_name: str) -> str:
    path = document_path(documents_dir, RECEIPTS, f"final_{order['id']}.pdf")

    doc = _OrderDocument(path, title="FINAL INVOICE", shop_name=shop_name)
    doc.header()
    doc.two_column_block(
        "Customer Details",
        _event_customer_lines(order),
        "Invoice",
        [
            f"Order ID: {order['id']}",
            f"Date: {date.today().isoformat()}",
        ],
    )
    doc.items_table(order["items"])

    rows = []
    if order.get("discount_cents"):
        rows.append(("Discount", f"-{format_money(order['discount_cents'])}"))
    rows.append(("Total", format_money(order["total_amount_cents"])))
    for p in order.get("payments", []):
        rows.append((f"Paid {(p.get('paid_at') or '')[:10]} ({p['method']})", format_money(p["amount_cents"])))
    doc.totals(rows)
    doc.emphasis("PAID IN FULL", color=SETTLED)
    doc.footer("Thank you for celebrating with us!")
    doc.save()
    return path
