"""
Ownership checks for the references a piece or subtype points at
"""
from backend.core.exceptions import BusinessRuleError, NotFoundError


def validate_piece_references(user_id, data, current=None):
    """
    Check that the piece type, subtype and gallery referenced by ``data``
    belong to ``user_id``.

    Args:
        user_id: Owner of the piece
        data: Validated create or patch payload
        current: Existing piece when patching, used to resolve the
            subtype/type pair when only one side changes

    Raises:
        NotFoundError: a referenced row is missing or owned by someone else
        BusinessRuleError: the subtype does not belong to the piece type
    """
    from backend.galleries.storage import galleries
    from .storage import piece_types, piece_subtypes

    piece_type_id = data.get('piece_type_id')
    if piece_type_id is not None and not piece_types.exists(user_id, piece_type_id):
        raise NotFoundError('Piece type not found')

    gallery_id = data.get('gallery_id')
    if gallery_id is not None and not galleries.exists(user_id, gallery_id):
        raise NotFoundError('Gallery not found')

    subtype_id = data.get('piece_subtype_id', current.piece_subtype_id if current else None)
    if subtype_id is None:
        return
    subtype = piece_subtypes.find(user_id, subtype_id)
    if subtype is None:
        raise NotFoundError('Piece subtype not found')

    if 'piece_type_id' in data:
        type_id = data['piece_type_id']
    else:
        type_id = current.piece_type_id if current else None
    if type_id is not None and subtype.piece_type_id != type_id:
        raise BusinessRuleError('Piece subtype does not belong to the selected piece type')


def apply_gallery_status(patch):
    """
    Keep status in line with gallery placement on a partial update:
    setting a gallery moves the piece to 'gallery', clearing it sends the
    piece back to 'workshop'. An explicit status always wins.
    """
    if 'gallery_id' in patch and 'status' not in patch:
        patch = dict(patch)
        patch['status'] = 'gallery' if patch['gallery_id'] else 'workshop'
    return patch


def filter_available_for_order(rows, target_gallery_id=None):
    """Pieces that can go on an order: not sold and, with a target gallery, unplaced or already there."""
    available = [piece for piece in rows if piece.status != 'sold']
    if not target_gallery_id:
        return available
    return [
        piece for piece in available
        if piece.gallery_id is None or piece.gallery_id == target_gallery_id
    ]
