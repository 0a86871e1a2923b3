"""Dense manual ordering within a sibling scope.

A scope is a set of column filters: `{'user_id': ...}` for lists,
`{'list_id': ..., 'parent_id': ...}` for nodes. Nothing here commits; the
calling handler owns the transaction so a failed request writes nothing.
"""

from models import db


def next_order(model, **scope):
    """max(order) + 1 within the scope, or 0 when the scope is empty."""
    current = db.session.query(db.func.max(model.order_index)).filter_by(**scope).scalar()
    return 0 if current is None else current + 1


def append(model, scope, **fields):
    """Insert a new item at the end of its scope and flush it so it gets an id."""
    values = dict(scope)
    values.update(fields)
    item = model(order_index=next_order(model, **scope), **values)
    db.session.add(item)
    db.session.flush()
    return item


def reorder(items, ordered_ids):
    """
    Rewrite `order_index` to each id's position in `ordered_ids`.

    `items` maps id -> instance and must already be authorized by the caller.
    The sequence is not checked for being a permutation: items left out keep
    their current order and a repeated id ends at its last position.
    Returns the number of positions written.
    """
    written = 0
    for idx, item_id in enumerate(ordered_ids):
        item = items.get(item_id)
        if item is None:
            continue
        item.order_index = idx
        written += 1
    return written


def reindex(items):
    """Compact a scope back to 0..n-1, keeping the current relative order."""
    ordered = sorted(items, key=lambda i: (i.order_index or 0, str(i.id or '')))
    for idx, item in enumerate(ordered):
        item.order_index = idx
    return ordered


def scope_items(model, **scope):
    return model.query.filter_by(**scope).order_by(model.order_index.asc()).all()
