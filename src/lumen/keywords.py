"""Keyword and tag extraction shared by skill matching and episode recall.

Every relevance heuristic in Lumen tokenizes text through this module so that
skills and episodes are scored against the same notion of a "keyword".
"""

import re

# Quoted trigger phrases, e.g. description: 'Use when asked to "ask ChatGPT"'
QUOTED_PATTERN = re.compile(r'"([^"]+)"')

# CJK text has no spaces; take 2-4 character runs as words.
CJK_PATTERN = re.compile(r"[一-龥]{2,4}")

WORD_PATTERN = re.compile(r"[a-z]{3,}", re.IGNORECASE)

TAG_KEYWORDS: dict[str, tuple[str, ...]] = {
    "browser": ("浏览器", "网页", "打开", "访问", "browser", "web", "page"),
    "chatgpt": ("chatgpt", "gpt", "openai"),
    "code": ("代码", "执行", "运行", "code", "execute", "run"),
    "file": ("文件", "保存", "读取", "file", "save", "read"),
    "search": ("搜索", "查找", "search", "find"),
}


def extract_words(text: str) -> list[str]:
    """Extract lowercase CJK runs and ASCII words, deduplicated in first-seen order.

    Unlike extract_keywords, quoted phrases are not kept whole, so every
    result is a plain run of letters.
    """
    words = CJK_PATTERN.findall(text)
    words.extend(word.lower() for word in WORD_PATTERN.findall(text))
    return list(dict.fromkeys(words))


def extract_keywords(text: str) -> list[str]:
    """Extract lowercase keywords from text, deduplicated in first-seen order.

    Quoted phrases come first and are kept verbatim (lowercased), followed by
    CJK runs and then ASCII words of three or more letters.
    """
    keywords = [phrase.lower() for phrase in QUOTED_PATTERN.findall(text)]
    keywords.extend(extract_words(text))
    return list(dict.fromkeys(k for k in keywords if k))


def extract_tags(text: str) -> list[str]:
    """Derive category tags from text using TAG_KEYWORDS.

    Returns tags in dictionary order, each at most once.
    """
    text_lower = text.lower()
    return [
        tag
        for tag, triggers in TAG_KEYWORDS.items()
        if any(trigger in text_lower for trigger in triggers)
    ]
