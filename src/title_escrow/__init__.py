"""Title Escrow — custodial escrow for real-estate title sales.

A title registry issues non-fungible title records; an escrow engine holds
title and funds in custody until inspection, tri-party approval and funding
conditions are met, then settles both atomically.
"""

__version__ = "0.1.0"
