# Overview: Post-commit side effects (PDF documents and WhatsApp messages) with retry/backoff.

"""
Side-effect dispatcher

Order services commit first and only then hand a snapshot of the order to
one of the notifier functions at the bottom of this module. The dispatcher
runs the job on a small thread pool ("thread" mode) or immediately
("inline" mode, used by tests and the CLI), retries it with exponential
backoff, and finally logs the failure. A failed document or message never
reaches the HTTP caller and never rolls anything back.

Jobs receive plain dicts only. ORM objects are bound to the request's
session and must not cross into a worker thread.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from flask import Flask, current_app

from ..models.orders import PAYMENT_STATUS_PAID
from . import document_service as documents
from . import notification_service as notify


EXTENSION_KEY = "side_effects"


class SideEffectDispatcher:
    def __init__(self, app: Flask | None = None):
        self._executor: ThreadPoolExecutor | None = None
        self.mode = "inline"
        self.attempts = 3
        self.backoff_base = 0.5
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        self.mode = app.config.get("SIDE_EFFECTS_MODE", "thread")
        self.attempts = max(1, int(app.config.get("SIDE_EFFECTS_RETRY_ATTEMPTS", 3)))
        self.backoff_base = float(app.config.get("SIDE_EFFECTS_BACKOFF_BASE", 0.5))
        if self.mode not in ("thread", "inline"):
            raise ValueError(f"SIDE_EFFECTS_MODE must be 'thread' or 'inline', got {self.mode!r}")
        if self.mode == "thread":
            self._executor = ThreadPoolExecutor(
                max_workers=int(app.config.get("SIDE_EFFECTS_MAX_WORKERS", 4)),
                thread_name_prefix="side-effects",
            )
        app.extensions[EXTENSION_KEY] = self

    def submit(self, name: str, func: Callable, *args, **kwargs) -> Future | bool:
        """
        Schedule func(*args, **kwargs). Inline mode returns whether the job
        eventually succeeded; thread mode returns the Future.
        """
        app = current_app._get_current_object()
        if self._executor is None:
            return self._run(app, name, func, args, kwargs)
        return self._executor.submit(self._run, app, name, func, args, kwargs)

    def _run(self, app: Flask, name: str, func: Callable, args: tuple, kwargs: dict) -> bool:
        with app.app_context():
            for attempt in range(1, self.attempts + 1):
                try:
                    func(*args, **kwargs)
                    return True
                except Exception:
                    if attempt >= self.attempts:
                        app.logger.exception("Side effect %s failed after %s attempts", name, attempt)
                        return False
                    delay = self.backoff_base * (2 ** (attempt - 1))
                    app.logger.warning(
                        "Side effect %s failed (attempt %s/%s), retrying in %.2fs",
                        name, attempt, self.attempts, delay,
                    )
                    time.sleep(delay)
        return False

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)


def dispatch(name: str, func: Callable, *args, **kwargs):
    return current_app.extensions[EXTENSION_KEY].submit(name, func, *args, **kwargs)


def public_document_url(folder: str, filename: str) -> str:
    base = current_app.config.get("PUBLIC_BASE_URL", "").rstrip("/")
    return f"{base}/{folder}/{filename}"


# Jobs (run inside the dispatcher)

def _render_kwargs() -> dict:
    return {
        "documents_dir": current_app.config["DOCUMENTS_DIR"],
        "shop_name": current_app.config.get("SHOP_NAME", "Sweet Shop"),
    }


def _send_document(phone: str, path: str, folder: str, caption: str) -> None:
    filename = os.path.basename(path)
    notify.get_whatsapp_client().send_document(
        phone,
        link=public_document_url(folder, filename),
        filename=filename,
        caption=caption,
    )


def send_regular_invoice(order: dict) -> None:
    path = documents.render_regular_invoice(order, **_render_kwargs())
    _send_document(order["phone"], path, documents.INVOICES, notify.purchase_receipt_text(order))


def send_booking_receipt(order: dict) -> None:
    path = documents.render_booking_receipt(order, **_render_kwargs())
    _send_document(order["phone"], path, documents.RECEIPTS, notify.booking_text(order))


def send_payment_receipt(order: dict, payment: dict) -> None:
    path = documents.render_payment_receipt(order, payment, **_render_kwargs())
    _send_document(order["phone"], path, documents.RECEIPTS, notify.payment_received_text(order, payment))


def send_final_invoice(order: dict) -> None:
    path = documents.render_final_invoice(order, **_render_kwargs())
    _send_document(order["phone"], path, documents.RECEIPTS, notify.final_payment_text(order))


def send_text(phone: str, body: str) -> None:
    notify.get_whatsapp_client().send_text(phone, body)


# Notifiers called by the order services after commit

def regular_order_settled(order: dict):
    return dispatch(f"regular_order:{order['id']}:invoice", send_regular_invoice, order)


def regular_order_cancelled(order: dict):
    return dispatch(
        f"regular_order:{order['id']}:cancelled", send_text, order["phone"], notify.regular_cancellation_text(order)
    )


def event_order_booked(order: dict):
    return dispatch(f"event_order:{order['id']}:booking", send_booking_receipt, order)


def event_payment_received(order: dict, payment: dict):
    if order["payment_status"] == PAYMENT_STATUS_PAID:
        return dispatch(f"event_order:{order['id']}:final_invoice", send_final_invoice, order)
    return dispatch(f"event_order:{order['id']}:payment_receipt", send_payment_receipt, order, payment)


def event_order_delivered(order: dict):
    return dispatch(f"event_order:{order['id']}:delivered", send_text, order["phone"], notify.delivered_text(order))


def event_order_cancelled(order: dict):
    return dispatch(
        f"event_order:{order['id']}:cancelled", send_text, order["phone"], notify.event_cancellation_text(order)
    )
