from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from processing.keyword_normalizer import is_ecosystem_term, is_noisy_keyword

DEFAULT_THEME = "Emerging Technology"

# Order matters: on equal match counts the earlier theme wins.
THEMES: Dict[str, List[str]] = {
    "DeFi": ["defi", "dex", "amm", "lending", "liquidity", "yield", "swap", "perps", "aggregator", "borrow"],
    "Liquid Staking": ["liquid-staking", "lst", "staking", "jito", "marinade", "sanctum", "jitosol", "msol", "restaking"],
    "NFTs": ["nft", "collection", "mint", "marketplace", "compressed-nfts", "metaplex", "tensor", "magic-eden"],
    "Gaming": ["gaming", "game", "play-to-earn", "web3-game", "metaverse"],
    "Infrastructure": ["validator", "rpc", "infrastructure", "node", "firedancer"],
    "Payments": ["payments", "stablecoin", "usdc", "transfer", "merchant", "pyusd"],
    "Mobile": ["mobile", "saga", "dapp-store", "smartphone", "seeker"],
    "DePIN": ["depin", "iot", "physical", "network", "sensors", "helium", "hivemapper", "wireless"],
    "AI & Agents": ["ai", "ai-agents", "agent", "artificial-intelligence", "model", "inference", "llm", "nosana"],
    "Developer Tools": ["sdk", "api", "framework", "tools", "library", "anchor", "cli"],
    "Token Extensions": ["token-extensions", "token-2022", "transfer-hook", "metadata-pointer"],
    "MEV": ["mev", "bundles", "arbitrage", "searcher", "block-engine"],
    "Cross-Chain": ["cross-chain", "bridge", "wormhole", "interoperability", "layerzero"],
    "RWA": ["rwa", "real-world-assets", "tokenization", "treasury", "securities"],
    "Oracles": ["oracle", "pyth", "switchboard", "price-feed"],
}

THEME_CONTEXT: Dict[str, str] = {
    "DeFi": "This represents new financial primitives and protocols being built on Solana.",
    "Liquid Staking": "Capital is moving into liquid staking tokens and the protocols built around them.",
    "NFTs": "Activity in digital collectibles, compressed NFTs, or new marketplace features.",
    "Gaming": "New web3 games or gaming infrastructure launching on Solana.",
    "Infrastructure": "Improvements to Solana's core infrastructure and validator ecosystem.",
    "Payments": "Development in payment rails, stablecoin integration, or merchant adoption.",
    "Mobile": "Mobile-first dApps and Saga phone ecosystem growth.",
    "DePIN": "Physical infrastructure networks being tokenized on Solana.",
    "AI & Agents": "AI agents, model hosting, inference, or data marketplaces on Solana.",
    "Developer Tools": "New frameworks, SDKs, or tools making Solana development easier.",
    "Token Extensions": "Adoption of Token-2022 program and its advanced features.",
    "MEV": "Searchers, bundles and block-engine tooling shaping transaction ordering.",
    "Cross-Chain": "Bridges and messaging layers connecting Solana to other chains.",
    "RWA": "Real-world assets such as treasuries and credit being brought on-chain.",
    "Oracles": "Price feeds and oracle networks supplying data to on-chain programs.",
}
DEFAULT_CONTEXT = "This represents an emerging trend in the Solana ecosystem."

GENERIC_TITLE_WORDS = frozenset({
    "solana", "crypto", "blockchain", "web3", "protocol", "token", "tokens",
    "network", "platform", "ecosystem", "data", "update", "launch",
    "community", "project", "developer", "development", "onchain",
    "on-chain", "transactions", "growth", "decentralized", "framework",
})

TITLE_SUFFIXES = ("Growth", "Momentum", "Surge", "Wave", "Expansion", "Rise")

_WORD_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def identify_theme(keywords: Sequence[str]) -> str:
    best_theme = DEFAULT_THEME
    best_score = 0
    for theme, terms in THEMES.items():
        score = sum(1 for kw in keywords if any(kw in term or term in kw for term in terms))
        if score > best_score:
            best_score = score
            best_theme = theme
    return best_theme


def theme_context(theme: str) -> str:
    return THEME_CONTEXT.get(theme, DEFAULT_CONTEXT)


def _theme_words(theme: str) -> set:
    return {w for w in _WORD_SPLIT_RE.split(theme.lower()) if w}


def _overlaps_theme(keyword: str, theme_words: set) -> bool:
    if keyword in theme_words:
        return True
    return any(part in theme_words for part in keyword.split("-") if part)


def pick_distinct_keyword(theme: str, centroid: Sequence[str]) -> str:
    """Keyword that best names a cluster within its theme.

    Prefers a specific ecosystem term or a long hyphenated compound over the
    generic vocabulary the theme name already conveys.
    """
    theme_words = _theme_words(theme)
    for kw in centroid:
        if kw in GENERIC_TITLE_WORDS or _overlaps_theme(kw, theme_words) or is_noisy_keyword(kw):
            continue
        if is_ecosystem_term(kw) or ("-" in kw and len(kw) > 5):
            return kw
    for kw in centroid:
        if is_ecosystem_term(kw):
            return kw
    if centroid:
        return centroid[0]
    return "Ecosystem"


def format_keyword(keyword: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in keyword.split("-"))


def title_suffix(formatted: str) -> str:
    if not formatted:
        return TITLE_SUFFIXES[0]
    return TITLE_SUFFIXES[ord(formatted[0]) % len(TITLE_SUFFIXES)]


def format_title(theme: str, centroid: Sequence[str]) -> str:
    formatted = format_keyword(pick_distinct_keyword(theme, centroid))
    return f"{theme}: {formatted} {title_suffix(formatted)}"


def build_description(
    theme: str,
    keywords: Sequence[str],
    signal_count: int,
    sources: Sequence[str],
) -> str:
    if len(sources) > 1:
        source_text = f"{len(sources)} different sources ({', '.join(sources)})"
    elif sources:
        source_text = sources[0]
    else:
        source_text = "no sources"
    keyword_list = ", ".join(keywords[:5])
    return (
        f"Detected {signal_count} signals across {source_text} indicating emerging activity "
        f"in {theme.lower()}. Key themes include: {keyword_list}. {theme_context(theme)}"
    )


def describe(theme: Optional[str], centroid: Sequence[str], signal_count: int, sources: Sequence[str]) -> Dict[str, str]:
    top = list(centroid[:5])
    theme = theme or identify_theme(top)
    return {
        "theme": theme,
        "title": format_title(theme, centroid),
        "description": build_description(theme, top, signal_count, sources),
    }
