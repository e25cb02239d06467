"""
Communication slicing for single-IED extraction.

Builds a copy of the ``Communication`` section that only carries the
ConnectedAP elements of one IED, dropping every SubNetwork left without
a ConnectedAP.  The source document is never modified: all edits are
applied to a deep copy, in two phases (collect, then remove).
"""

from __future__ import annotations

import logging

from lxml import etree

from .accessors import connected_aps_not_for, empty_subnetworks
from .models import IncompleteDocumentError
from .utils import deep_copy

logger = logging.getLogger(__name__)


def filter_communication(
    communication: etree._Element,
    ied_name: str,
) -> etree._Element:
    """Strip a detached Communication element down to *ied_name*'s APs.

    Operates **in place** on *communication*, which must not belong to a
    tree the caller wants to keep.  SubNetworks that end up without any
    ConnectedAP are removed; the order of everything else is preserved.

    Returns:
        The same *communication* element.
    """
    foreign = connected_aps_not_for(communication, ied_name)
    for cap in foreign:
        cap.getparent().remove(cap)

    empty = empty_subnetworks(communication)
    for subnet in empty:
        communication.remove(subnet)
        logger.debug(
            "Dropped SubNetwork '%s' (no ConnectedAP for IED '%s')",
            subnet.get('name', ''), ied_name,
        )

    logger.debug(
        "Communication for IED '%s': removed %d ConnectedAP(s), "
        "%d SubNetwork(s)",
        ied_name, len(foreign), len(empty),
    )
    return communication


def extract_communication(document, ied: etree._Element) -> etree._Element:
    """Return the slice of the Communication section attached to *ied*.

    Args:
        document: The source :class:`SCLDocument`.
        ied: An IED element belonging to *document*.

    Returns:
        A new, detached ``Communication`` element.

    Raises:
        IncompleteDocumentError: If *document* has no Communication section.
    """
    ied_name = ied.get('name', '')
    source = document.communication_element
    if source is None:
        raise IncompleteDocumentError('Communication', ied_name)
    return filter_communication(deep_copy(source), ied_name)
