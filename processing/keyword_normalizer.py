"""processing.keyword_normalizer

Keyword cleanup used before clustering: noisy-token rejection, alias folding
onto canonical terms, and the ecosystem-term weighting shared by similarity and
centroid computation.

The tables here are fixed lookup data; nothing mutates them at runtime.
"""

from __future__ import annotations

import re
from typing import Dict, FrozenSet, Iterable, List

import regex as regex_re  # for Unicode properties like \p{Emoji}

# Protocols, products and domain terms specific to the ecosystem.
ECOSYSTEM_TERMS: FrozenSet[str] = frozenset({
    "solana", "jupiter", "jito", "marinade", "raydium", "orca", "drift",
    "tensor", "kamino", "pyth", "helium", "hivemapper", "phantom",
    "firedancer", "anchor", "metaplex", "magic-eden", "marginfi", "meteora",
    "sanctum", "squads", "switchboard", "wormhole", "bonk", "saga", "solend",
    "mango", "zeta", "parcl", "backpack", "nosana", "render", "pump-fun",
    "defi", "dex", "nft", "depin", "liquid-staking", "token-2022",
    "token-extensions", "compressed-nfts", "blinks", "mev", "rwa",
    "ai-agents", "validator", "stablecoin", "usdc", "pyusd", "perps",
})

# Near-synonyms folded onto one canonical term.
KEYWORD_ALIASES: Dict[str, str] = {
    "dexes": "dex",
    "amm": "dex",
    "amms": "dex",
    "swap": "dex",
    "swaps": "dex",
    "trading": "dex",
    "lst": "liquid-staking",
    "lsts": "liquid-staking",
    "liquid-staking-token": "liquid-staking",
    "staking-derivatives": "liquid-staking",
    "nfts": "nft",
    "cnft": "compressed-nfts",
    "cnfts": "compressed-nfts",
    "compressed-nft": "compressed-nfts",
    "agent": "ai-agents",
    "agents": "ai-agents",
    "ai-agent": "ai-agents",
    "perpetuals": "perps",
    "perp": "perps",
    "stablecoins": "stablecoin",
    "oracles": "oracle",
    "validators": "validator",
    "token22": "token-2022",
    "spl-token-2022": "token-2022",
    "bridge": "cross-chain",
    "bridges": "cross-chain",
    "bridging": "cross-chain",
    "real-world-assets": "rwa",
    "tokenized-assets": "rwa",
    "games": "gaming",
    "game": "gaming",
    "payment": "payments",
    "sdks": "sdk",
}

FILLER_WORDS: FrozenSet[str] = frozenset({
    "looking", "anyone", "really", "thanks", "thank", "please", "help",
    "need", "want", "know", "think", "like", "good", "great", "best",
    "here", "there", "what", "when", "where", "which", "would", "could",
    "should", "today", "people", "thing", "things", "very", "much", "many",
    "other", "your", "they", "them", "their", "have", "been", "will",
    "does", "doing", "make", "made", "going", "getting", "still", "even",
    "first", "last", "every", "another", "something", "anything",
    "everything", "nothing", "hello", "question", "issue", "error",
    "working", "trying", "check", "without", "after", "before", "while",
    "because", "since", "over", "under", "just", "some", "more", "most",
    "with", "this", "that", "from", "into", "about", "also", "only",
})

_NUMERIC_RE = re.compile(r"^\d+$")
# Handles like "james09777", or ids like "2024abc".
_USERNAME_RES = (
    re.compile(r"^[a-z]+\d{3,}$"),
    re.compile(r"^\d+[a-z]+$"),
)
_SYMBOLS_ONLY_RE = regex_re.compile(r"^[\p{P}\p{S}\p{Emoji_Presentation}\s]+$")

ECOSYSTEM_TERM_WEIGHT = 2.0
DEFAULT_TERM_WEIGHT = 1.0


def is_ecosystem_term(keyword: str) -> bool:
    return keyword in ECOSYSTEM_TERMS


def keyword_weight(keyword: str) -> float:
    return ECOSYSTEM_TERM_WEIGHT if keyword in ECOSYSTEM_TERMS else DEFAULT_TERM_WEIGHT


def is_noisy_keyword(keyword: str) -> bool:
    kw = (keyword or "").strip().lower()
    if kw in ECOSYSTEM_TERMS:
        return False
    if len(kw) <= 2:
        return True
    if _NUMERIC_RE.match(kw):
        return True
    if any(p.match(kw) for p in _USERNAME_RES):
        return True
    if _SYMBOLS_ONLY_RE.match(kw):
        return True
    return kw in FILLER_WORDS


def normalize_keywords(keywords: Iterable[str]) -> List[str]:
    """Drop noise, fold aliases, dedupe. Returns keywords in first-seen order.

    An aliased keyword contributes its canonical form; the original is kept
    alongside it only when it is an ecosystem term or longer than 3 characters.
    """
    out: Dict[str, None] = {}
    for raw in keywords:
        kw = (raw or "").strip().lower()
        if not kw or is_noisy_keyword(kw):
            continue
        canonical = KEYWORD_ALIASES.get(kw)
        if canonical is None:
            out[kw] = None
            continue
        out[canonical] = None
        if kw in ECOSYSTEM_TERMS or len(kw) > 3:
            out[kw] = None
    return list(out)
