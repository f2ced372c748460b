"""
Main Orchestrator for WealthFlow

This module ties the pure ledger core to persistence and defines the
end-to-end flows for:
1. Startup (legacy upgrade → load → migrate → seed if empty)
2. Mutation (validate → apply → save → audit)
3. Backup (export envelope / import → validate → migrate → replace)

DESIGN DECISION: The session is the only stateful object:
- Every derivation is a pure function of the current Store
- Every mutation produces a new Store; a refused mutation leaves it untouched
- Every persisted write and every refusal is audited
"""

from typing import Optional

from wealthflow.audit import AuditLogger
from wealthflow.config import Settings, get_settings
from wealthflow.ids import Clock, IdGenerator, new_id, utc_now
from wealthflow.ledger import (
    account_balances,
    active_accounts,
    add_account,
    add_budget,
    add_category,
    available_months,
    budget_progress,
    build_flow_graph,
    category_spend_named,
    delete_account,
    delete_budget,
    delete_category,
    delete_transaction,
    month_summary,
    rename_account,
    rename_category,
    save_transaction,
    suggest,
    toggle_account_archived,
    top_categories,
    vendor_spend,
)
from wealthflow.migrations import create_default_store
from wealthflow.models.ledger import (
    Account,
    BudgetProgress,
    CategoryGroup,
    FlowGraph,
    ImportResult,
    MonthlyTotals,
    MutationResult,
    NamedAmount,
    Store,
    Suggestion,
)
from wealthflow.services.backup import backup_filename, export_json, parse_backup
from wealthflow.services.storage import JsonFileStoreBackend, StorePersistence
from wealthflow.validation import TransactionDraft


class LedgerSession:
    """
    Holds the current Store and routes every change through persistence.

    Until ``load`` is awaited the session holds a default store that is
    never written.
    """

    def __init__(
        self,
        persistence: StorePersistence,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
        new_id: IdGenerator = new_id,
        now: Clock = utc_now,
    ):
        self._persistence = persistence
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger
        self._new_id = new_id
        self._now = now
        self._store = create_default_store(new_id=new_id, now=now)
        self._warning: Optional[str] = None

    @property
    def store(self) -> Store:
        return self._store

    @property
    def warning(self) -> Optional[str]:
        """Banner text set when storage was unavailable at load time."""
        return self._warning

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def load(self) -> Store:
        result = await self._persistence.load()
        self._store = result.store
        self._warning = result.warning
        return self._store

    async def apply(self, result: MutationResult, operation: str) -> MutationResult:
        """
        Commit a mutation result: adopt and save its store if it succeeded.

        Refused mutations are audited and leave the session unchanged.
        """
        if not result.ok:
            if self._audit_logger:
                self._audit_logger.log_mutation(
                    operation,
                    result.entity_id,
                    [issue.model_dump() for issue in result.issues],
                )
            return result

        self._store = await self._persistence.save(result.store)
        if self._audit_logger:
            self._audit_logger.log_mutation(operation, result.entity_id)
        return result.model_copy(update={"store": self._store})

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def add_account(self, name: str) -> MutationResult:
        return await self.apply(add_account(self._store, name, new_id=self._new_id), "add_account")

    async def rename_account(self, account_id: str, name: str) -> MutationResult:
        return await self.apply(rename_account(self._store, account_id, name), "rename_account")

    async def toggle_account_archived(self, account_id: str) -> MutationResult:
        return await self.apply(
            toggle_account_archived(self._store, account_id), "toggle_account_archived"
        )

    async def delete_account(
        self, account_id: str, reassign_to: Optional[str] = None
    ) -> MutationResult:
        return await self.apply(
            delete_account(self._store, account_id, reassign_to), "delete_account"
        )

    # -------------------------------------------------------------------------
    # Categories and budgets
    # -------------------------------------------------------------------------

    async def add_category(
        self, name: str, group: CategoryGroup, color: Optional[str] = None
    ) -> MutationResult:
        return await self.apply(
            add_category(self._store, name, group, color, new_id=self._new_id),
            "add_category",
        )

    async def rename_category(self, category_id: str, name: str) -> MutationResult:
        return await self.apply(rename_category(self._store, category_id, name), "rename_category")

    async def delete_category(self, category_id: str, replacement_id: str) -> MutationResult:
        return await self.apply(
            delete_category(self._store, category_id, replacement_id), "delete_category"
        )

    async def add_budget(self, category_id: str, limit) -> MutationResult:
        return await self.apply(
            add_budget(self._store, category_id, limit, new_id=self._new_id), "add_budget"
        )

    async def delete_budget(self, budget_id: str) -> MutationResult:
        return await self.apply(delete_budget(self._store, budget_id), "delete_budget")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def save_transaction(
        self, draft: TransactionDraft, editing_id: Optional[str] = None
    ) -> MutationResult:
        return await self.apply(
            save_transaction(self._store, draft, editing_id, new_id=self._new_id),
            "save_transaction",
        )

    async def delete_transaction(self, transaction_id: str) -> MutationResult:
        return await self.apply(
            delete_transaction(self._store, transaction_id), "delete_transaction"
        )

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    async def import_backup(self, text: str) -> ImportResult:
        """
        Replace the whole store with an uploaded backup.

        A rejected file leaves the current store and persisted state as
        they were.
        """
        result = parse_backup(text, new_id=self._new_id, now=self._now)
        if not result.ok:
            if self._audit_logger:
                self._audit_logger.log_import_rejected(result.error)
            return result

        await self._persistence.reset()
        self._store = await self._persistence.save(result.store)
        if self._audit_logger:
            self._audit_logger.log_import_accepted(len(self._store.transactions))
        return ImportResult(store=self._store)

    def export_backup(self) -> tuple[str, str]:
        """Returns (filename, json text) for a downloadable backup."""
        filename = backup_filename(now=self._now)
        text = export_json(self._store, now=self._now)
        if self._audit_logger:
            self._audit_logger.log_export_created(filename)
        return filename, text

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def balances(self) -> dict[str, float]:
        return account_balances(self._store)

    def active_accounts(self) -> list[Account]:
        return active_accounts(self._store)

    def suggestions(self, query: str) -> list[Suggestion]:
        return suggest(
            self._store.transactions,
            query,
            limit=self._settings.ledger.suggestion_limit,
            now=self._now,
        )

    def flow_graph(self) -> FlowGraph:
        return build_flow_graph(self._store)

    def available_months(self) -> list[str]:
        return available_months(self._store.transactions)

    def month_summary(self, month: str) -> MonthlyTotals:
        return month_summary(self._store.transactions, month)

    def top_categories(self, month: str) -> list[NamedAmount]:
        return top_categories(self._store, month, limit=self._settings.ledger.top_category_limit)

    def category_spend(self) -> list[NamedAmount]:
        return category_spend_named(self._store)

    def vendor_spend(self) -> list[NamedAmount]:
        return vendor_spend(self._store.transactions, limit=self._settings.ledger.top_vendor_limit)

    def budget_progress(self) -> list[BudgetProgress]:
        return budget_progress(self._store)


def create_app_components(settings: Optional[Settings] = None) -> LedgerSession:
    """
    Factory function to wire a session onto the local JSON file backend.

    Call ``await session.load()`` before use.
    """
    settings = settings or get_settings()
    audit_logger = AuditLogger(max_events=settings.app.audit_trail_size)
    persistence = StorePersistence(
        JsonFileStoreBackend(settings.storage),
        audit_logger=audit_logger,
    )
    return LedgerSession(persistence, settings=settings, audit_logger=audit_logger)
