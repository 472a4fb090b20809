"""VoucherRegistry - metadata of uploaded payment vouchers."""

from __future__ import annotations

import logging

from coursereg.errors import EntityKind, ValidationError, classified
from coursereg.registry.models import VoucherView
from coursereg.store import EntityStore, Inscription, Voucher
from coursereg.validation import ConflictGuard, ReferenceValidator

logger = logging.getLogger(__name__)


class VoucherRegistry:
    """Vouchers exist before the inscription that references them.

    Only the stored file reference is kept; transporting the bytes is the
    caller's business.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def create_voucher(self, file_ref: str, mime_type: str, filename: str) -> VoucherView:
        """Record an uploaded voucher.

        Raises:
            ValidationError: If the file reference is blank
        """
        if not file_ref.strip():
            raise ValidationError("Voucher file reference cannot be empty")

        with classified("creating the voucher"), self._store.unit_of_work() as session:
            voucher = Voucher(file_ref=file_ref, mime_type=mime_type, filename=filename)
            session.add(voucher)
            self._store.flush(session)
            session.refresh(voucher)
            view = VoucherView.from_model(voucher)

        logger.info("Voucher %s recorded (%s)", view.id, view.mime_type)
        return view

    def get_voucher(self, voucher_id: int) -> VoucherView:
        """Get voucher by ID.

        Raises:
            NotFoundError: If the voucher doesn't exist
        """
        with classified("reading the voucher"), self._store.reading() as session:
            return VoucherView.from_model(
                ReferenceValidator(session).require(EntityKind.VOUCHER, voucher_id)
            )

    def delete_voucher(self, voucher_id: int) -> None:
        """Delete a voucher that no inscription references.

        Raises:
            NotFoundError: If the voucher doesn't exist
            ConflictError: If an inscription references it
        """
        with classified("deleting the voucher"), self._store.unit_of_work() as session:
            voucher = ReferenceValidator(session).require(EntityKind.VOUCHER, voucher_id)
            ConflictGuard(session).check_no_dependents(
                EntityKind.VOUCHER, voucher_id, Inscription, "voucher_id", "inscriptions"
            )
            session.delete(voucher)

        logger.info("Voucher %s deleted", voucher_id)
