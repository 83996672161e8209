"""
Access Control

Pure permission predicates over a loaded document (with its shares), the
caller's username and the caller's admin flag. Nothing here touches the
database or raises.

Share grants give access to content only. Renaming, resharing, revoking and
lifecycle changes are reserved to the owner and administrators.
"""

from doc_registry.models.enums import Permission
from doc_registry.models.orm.document import Document


def can_read(doc: Document, caller: str, is_admin: bool) -> bool:
    """Admin, owner, or a grant with can_read."""
    if is_admin or doc.owner == caller:
        return True
    share = doc.share_for(caller)
    return share is not None and share.can_read


def can_write(doc: Document, caller: str, is_admin: bool) -> bool:
    """Admin, owner, or a grant with can_write."""
    if is_admin or doc.owner == caller:
        return True
    share = doc.share_for(caller)
    return share is not None and share.can_write


def can_manage(doc: Document, caller: str, is_admin: bool) -> bool:
    """Admin or owner."""
    return is_admin or doc.owner == caller


def effective_permissions(doc: Document, caller: str, is_admin: bool) -> list[str]:
    """
    Permissions the caller holds on the document.

    Returns:
        Subset of ["read", "write"] in that order; owners and admins get both
    """
    perms = []
    if can_read(doc, caller, is_admin):
        perms.append(Permission.READ.value)
    if can_write(doc, caller, is_admin):
        perms.append(Permission.WRITE.value)
    return perms
