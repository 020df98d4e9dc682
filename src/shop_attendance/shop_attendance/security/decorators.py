from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from .owner_session import OwnerSession


def owner_required(view):
    """Allow the view only while the owner console is unlocked for ``shop_id``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        shop_id = kwargs.get("shop_id")
        if shop_id is None or not OwnerSession(session).is_unlocked(int(shop_id)):
            return jsonify({"success": False, "message": "Owner PIN required", "owner_locked": True}), 403
        return view(*args, **kwargs)

    return wrapper
