"""
import_engine.field_map - Fixed CSV headers and column → attribute mapping.

Both formats use Japanese column names, in this exact order.
"""

# Price CSV:  日付,始値,高値,安値,終値,出来高
PRICE_COLUMNS: dict[str, str] = {
    "日付":   "date",
    "始値":   "open",
    "高値":   "high",
    "安値":   "low",
    "終値":   "close",
    "出来高": "volume",
}

# News CSV:  公開日時,タイトル,要約,URL,ソース,センチメント,センチメントスコア
NEWS_COLUMNS: dict[str, str] = {
    "公開日時":           "published_at",
    "タイトル":           "title",
    "要約":               "summary",
    "URL":                "url",
    "ソース":             "source",
    "センチメント":       "sentiment",
    "センチメントスコア": "sentiment_score",
}

PRICE_HEADERS: tuple[str, ...] = tuple(PRICE_COLUMNS)
NEWS_HEADERS: tuple[str, ...] = tuple(NEWS_COLUMNS)

# Labels used in row-level messages
PRICE_LABELS: dict[str, str] = {
    "open":   "open price",
    "high":   "high price",
    "low":    "low price",
    "close":  "close price",
    "volume": "volume",
}

SENTIMENTS = ("positive", "negative", "neutral")
DEFAULT_SENTIMENT = "neutral"
