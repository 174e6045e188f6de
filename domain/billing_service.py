"""Domain service for preview, commit and report — no external dependencies."""

from __future__ import annotations

import logging
from dataclasses import replace

from domain.billing_rules import check_group, check_group_known
from domain.fulfillment import shortages
from domain.grouping import natural_key
from domain.invoicing import billable_lines, preview
from domain.models import (
    CommitOutcome,
    CommitStatus,
    GroupCommitResult,
    GroupingMode,
    InvoiceHeader,
    InvoiceRecord,
    Preview,
    Rejection,
    ReportFilters,
    SchoolRollup,
)
from domain.normalization import normalize_group_key
from domain.ports import BillingRowRepository, InvoiceRepository, RepositoryError
from domain.rollup import filter_rows, rollup

logger = logging.getLogger(__name__)


class BillingService:
    """Runs the billing engine against the invoice and order-row ports."""

    def __init__(
        self,
        invoices: InvoiceRepository | None = None,
        rows: BillingRowRepository | None = None,
    ) -> None:
        self._invoices = invoices
        self._rows = rows

    def preview(self, items, grouping=GroupingMode.NONE, **options) -> Preview:
        """Side-effect free; see domain.invoicing.preview for *options*."""
        return preview(items, grouping, **options)

    def commit(
        self,
        items,
        header: InvoiceHeader,
        grouping=GroupingMode.NONE,
        group_selection=None,
        **options,
    ) -> CommitOutcome:
        """Create one invoice per selected group.

        Groups are committed independently: a rejected or failed group does
        not undo the groups already created. Lines with quantity 0 are not
        stored; they contribute nothing to any total.

        Args:
            items: Canonical LineItem values.
            header: Header fields copied onto each invoice.
            grouping: GroupingMode or its name.
            group_selection: Group keys to commit; None commits every group.
                Keys naming no group come back REJECTED with GROUP_001.
            **options: Same pricing options as preview().
        """
        if self._invoices is None:
            raise ValueError("No invoice repository configured")
        result = preview(items, grouping, **options)
        if options.get("overrides") is not None:
            logger.debug("Committing with overrides %s", options["overrides"].to_flat())
        selected = None
        if group_selection is not None:
            selected = {normalize_group_key(key) for key in group_selection}

        outcomes = []
        known = {group.key for group in result.groups}
        unknown = sorted(selected - known, key=natural_key) if selected else []
        for key in unknown:
            rejection = Rejection(group_key=key, reasons=(check_group_known(key, known),))
            logger.warning("Group %s rejected: not in preview", key)
            outcomes.append(
                GroupCommitResult(
                    group_key=key,
                    status=CommitStatus.REJECTED,
                    rejection=rejection,
                )
            )

        for group in result.groups:
            if selected is not None and group.key not in selected:
                continue

            rejection = check_group(group)
            if rejection is not None:
                logger.warning(
                    "Group %s rejected: %s",
                    group.key,
                    ", ".join(r.code for r in rejection.reasons),
                )
                outcomes.append(
                    GroupCommitResult(
                        group_key=group.key,
                        status=CommitStatus.REJECTED,
                        rejection=rejection,
                    )
                )
                continue

            for line, fulfillment in shortages(group.lines):
                logger.warning(
                    "Group %s line %s short by %d",
                    group.key,
                    line.item.line_id,
                    fulfillment.short_qty,
                )

            record = InvoiceRecord(
                header=header,
                grouping=result.grouping,
                group=replace(group, lines=billable_lines(group)),
            )
            try:
                saved = self._invoices.save(record)
            except RepositoryError as exc:
                logger.warning("Group %s failed to commit: %s", group.key, exc)
                outcomes.append(
                    GroupCommitResult(
                        group_key=group.key,
                        status=CommitStatus.FAILED,
                        error=str(exc),
                    )
                )
                continue

            logger.info(
                "Created invoice %s for group %s, total %s",
                saved.invoice_no,
                group.key,
                saved.total,
            )
            outcomes.append(
                GroupCommitResult(
                    group_key=group.key,
                    status=CommitStatus.CREATED,
                    invoice=saved,
                )
            )

        return CommitOutcome(results=tuple(outcomes))

    def report(self, filters: ReportFilters) -> SchoolRollup:
        """Roll committed order rows up to class, supplier and school totals."""
        if self._rows is None:
            raise ValueError("No billing row repository configured")
        rows = filter_rows(self._rows.list_book_rows(filters), filters.view)
        result = rollup(rows)
        logger.info(
            "Billing report for school %s: %d row(s), %d supplier(s)",
            filters.school_id,
            len(rows),
            len(result.suppliers),
        )
        return result
