from .engine import base_score, compute_compatibility, rank_peers, score_peer
from .types import ScoredPeer

__all__ = ["base_score", "compute_compatibility", "rank_peers", "score_peer", "ScoredPeer"]
