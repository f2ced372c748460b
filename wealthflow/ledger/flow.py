"""
Flow Graph Builder

Builds the Sankey data for the analytics panel:
Income -> accounts -> expense categories, plus account -> account transfers.

DESIGN DECISION: Output order is fully deterministic. Nodes are grouped by
role (Income, then accounts, then categories) and within a role sorted by
total flow descending with the name as tie-break. Links are sorted by value
descending, then by node indices. Identical data always yields an identical
graph, which keeps the chart layout stable between renders.
"""

from collections import defaultdict
from enum import IntEnum

from wealthflow.models.ledger import (
    ExpenseTransaction,
    FlowGraph,
    FlowLink,
    FlowNode,
    IncomeTransaction,
    Store,
    TransferTransaction,
)


INCOME_NODE = "Income"


class NodeRole(IntEnum):
    """Column a node is drawn in; lower values come first."""
    INCOME = 0
    ACCOUNT = 1
    CATEGORY = 2


def build_flow_graph(store: Store) -> FlowGraph:
    """
    Aggregate every transaction into one weighted edge per (source, target) name pair.

    Nodes are display names, so two entities sharing a name share a node.
    Dangling ids show up as "Unknown". A name used in more than one role is
    placed in the earliest role.
    """
    edges: dict[tuple[str, str], float] = defaultdict(float)
    roles: dict[str, NodeRole] = {}

    def visit(name: str, role: NodeRole) -> str:
        roles[name] = min(role, roles.get(name, role))
        return name

    for tx in store.transactions:
        if isinstance(tx, IncomeTransaction):
            source = visit(INCOME_NODE, NodeRole.INCOME)
            target = visit(store.account_name(tx.account_id), NodeRole.ACCOUNT)
        elif isinstance(tx, ExpenseTransaction):
            source = visit(store.account_name(tx.account_id), NodeRole.ACCOUNT)
            target = visit(store.category_name(tx.category_id), NodeRole.CATEGORY)
        elif isinstance(tx, TransferTransaction):
            source = visit(store.account_name(tx.from_account_id), NodeRole.ACCOUNT)
            target = visit(store.account_name(tx.to_account_id), NodeRole.ACCOUNT)
        else:
            continue
        edges[(source, target)] += tx.amount

    throughput: dict[str, float] = defaultdict(float)
    for (source, target), value in edges.items():
        throughput[source] += value
        throughput[target] += value

    ordered = sorted(roles, key=lambda name: (roles[name], -throughput[name], name))
    index = {name: position for position, name in enumerate(ordered)}

    links = [
        FlowLink(source=index[source], target=index[target], value=value)
        for (source, target), value in edges.items()
    ]
    links.sort(key=lambda link: (-link.value, link.source, link.target))

    return FlowGraph(nodes=[FlowNode(name=name) for name in ordered], links=links)
