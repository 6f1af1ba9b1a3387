from enum import Enum


class TokenTag(str, Enum):
    MEME = "meme"
    AI = "ai"
    GAMING = "gaming"
    DEFI = "defi"
    NFT = "nft"
