# Overview: Serves generated invoice and receipt PDFs.

"""
Document links go out in WhatsApp messages, so these routes are public:
the file names are only guessable per order id, and nothing else under
DOCUMENTS_DIR is reachable.
"""

import os
import re

from flask import Blueprint, abort, current_app, send_from_directory

from ..services.document_service import INVOICES, RECEIPTS


documents_bp = Blueprint("documents", __name__)

_INVOICE_NAME = re.compile(r"^invoice_\d+\.pdf$")
_RECEIPT_NAME = re.compile(r"^(booking|payment|final)_\d+\.pdf$")


def _serve(folder: str, filename: str):
    directory = os.path.join(current_app.config["DOCUMENTS_DIR"], folder)
    return send_from_directory(directory, filename, mimetype="application/pdf")


@documents_bp.get("/invoices/<filename>")
def invoice(filename: str):
    if not _INVOICE_NAME.match(filename):
        abort(404)
    return _serve(INVOICES, filename)


@documents_bp.get("/receipts/<filename>")
def receipt(filename: str):
    if not _RECEIPT_NAME.match(filename):
        abort(404)
    return _serve(RECEIPTS, filename)
