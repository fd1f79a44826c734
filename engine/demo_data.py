"""Demo signals for offline runs.

Three multi-source narratives (AI agents, Jupiter routing, Jito liquid staking)
plus a couple of unrelated single signals, timestamped relative to `now`.
"""
from typing import Any, Dict, List, Optional

from processing.models import DAY_MS, Signal, now_ms

_DEMO: List[Dict[str, Any]] = [
    # AI agents
    {"id": "github_ai_1", "source": "github", "age": 1, "weight": 4.5,
     "content": "solana-ai-agents: framework for autonomous agents with wallet integration",
     "metadata": {"url": "https://github.com/sendai/solana-ai-agents", "author": "sendai", "metrics": {"stars": 892}},
     "keywords": ["ai-agents", "nosana", "inference", "gpu"]},
    {"id": "twitter_ai_1", "source": "twitter", "age": 1, "weight": 3.0,
     "content": "AI agents are the next frontier; speed makes Solana the natural home for agent transactions.",
     "metadata": {"author": "aeyakovenko"},
     "keywords": ["ai-agents", "nosana", "autonomous"]},
    {"id": "onchain_ai_1", "source": "onchain", "age": 2, "weight": 3.5,
     "content": "47 new programs with AI metadata deployed in the past 7 days",
     "metadata": {"metrics": {"new_programs": 47, "weekly_growth": 3.2}},
     "keywords": ["ai-agents", "nosana", "deployments"]},
    {"id": "report_ai_1", "source": "report", "age": 4, "weight": 2.5,
     "content": "How sub-second finality enables real-time autonomous agents",
     "metadata": {"url": "https://helius.dev/blog/ai-agents-solana", "author": "Helius Blog"},
     "keywords": ["ai-agents", "nosana", "finality", "wallets"]},
    # Jupiter routing
    {"id": "github_jup_1", "source": "github", "age": 2, "weight": 3.0,
     "content": "jupiter-core: route aggregation across AMMs",
     "metadata": {"url": "https://github.com/jup-ag/jupiter-core", "metrics": {"stars": 410}},
     "keywords": ["jupiter", "dex", "aggregator", "routing"]},
    {"id": "onchain_jup_1", "source": "onchain", "age": 1, "weight": 4.0,
     "content": "Jupiter routed volume up 38% week over week",
     "metadata": {"metrics": {"volume_change": 0.38}},
     "keywords": ["jupiter", "dex", "volume"]},
    {"id": "twitter_jup_1", "source": "twitter", "age": 3, "weight": 2.8,
     "content": "Limit orders on Jupiter are quietly eating CEX flow",
     "metadata": {"author": "weremeow"},
     "keywords": ["jupiter", "dex", "limit-orders"]},
    {"id": "discord_jup_1", "source": "discord", "age": 9, "weight": 1.5,
     "content": "How do I integrate Jupiter swap API with my program?",
     "metadata": {"url": "https://solana.stackexchange.com/q/1"},
     "keywords": ["jupiter", "dex", "integration"]},
    # Jito liquid staking
    {"id": "onchain_jito_1", "source": "onchain", "age": 2, "weight": 3.5,
     "content": "JitoSOL supply crosses 15M",
     "metadata": {"metrics": {"supply": 15_000_000}},
     "keywords": ["jito", "liquid-staking", "restaking"]},
    {"id": "twitter_jito_1", "source": "twitter", "age": 3, "weight": 2.0,
     "content": "MEV tips flowing to JitoSOL holders make it the default LST",
     "metadata": {"author": "buffalu__"},
     "keywords": ["jito", "liquid-staking", "jitosol", "yields"]},
    {"id": "report_jito_1", "source": "report", "age": 11, "weight": 2.5,
     "content": "Validator tips and the economics of liquid staking",
     "metadata": {"author": "Messari"},
     "keywords": ["jito", "liquid-staking", "validator-tips"]},
    # Unrelated singles
    {"id": "github_helium_1", "source": "github", "age": 5, "weight": 1.0,
     "content": "helium-mobile-sdk", "metadata": {},
     "keywords": ["helium", "hivemapper"]},
    {"id": "twitter_tensor_1", "source": "twitter", "age": 6, "weight": 1.2,
     "content": "cNFT volume on Tensor", "metadata": {},
     "keywords": ["tensor", "compressed-nfts"]},
]


def generate_demo_signals(now: Optional[float] = None) -> List[Signal]:
    if now is None:
        now = now_ms()
    out: List[Signal] = []
    for rec in _DEMO:
        data = {k: v for k, v in rec.items() if k != "age"}
        data["timestamp"] = now - rec["age"] * DAY_MS
        out.append(Signal.from_dict(data))
    return out


def demo_collection(now: Optional[float] = None) -> Dict[str, Any]:
    """Demo signals grouped the way collectors write collection files."""
    if now is None:
        now = now_ms()
    grouped: Dict[str, Dict[str, Any]] = {}
    for s in generate_demo_signals(now):
        entry = grouped.setdefault(s.source.value, {"signals": [], "collectedAt": now, "source": s.source.value})
        entry["signals"].append(s.to_dict())
    return grouped
