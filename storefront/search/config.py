# config.py — relevance scoring weights

# Exact match
EXACT_MATCH_WEIGHT = 200
NORMALIZED_EXACT_MATCH_WEIGHT = 220

# Prefix match
STARTS_WITH_WEIGHT = 80
NORMALIZED_STARTS_WITH_WEIGHT = 90

# Substring match
CONTAINS_WEIGHT = 60
NORMALIZED_CONTAINS_WEIGHT = 70

# Token coverage: round(coverage * COVERAGE_WEIGHT), coverage in [0, 1]
COVERAGE_WEIGHT = 100

# Per candidate word starting with the full normalized query
WORD_PREFIX_WEIGHT = 30

# Keyword table membership
PRODUCT_KEYWORD_WEIGHT = 20
BRAND_KEYWORD_WEIGHT = 15
CATEGORY_KEYWORD_WEIGHT = 10

# Length heuristics
SHORT_CANDIDATE_LENGTH = 20      # strictly shorter gets the bonus
SHORT_CANDIDATE_BONUS = 10
LONG_CANDIDATE_LENGTH = 60       # strictly longer gets penalized
LONG_CANDIDATE_STEP = 5          # one point per STEP chars over the limit
LONG_CANDIDATE_MAX_PENALTY = 20

# Per distinct domain term found in the normalized candidate
DOMAIN_TERM_WEIGHT = 25

# Suggestions
MIN_QUERY_LENGTH = 2
DEFAULT_MAX_SUGGESTIONS = 8

# Keyword extraction
MIN_KEYWORD_LENGTH = 2

# Image-assisted search
IMAGE_SEARCH_KEYWORD_LIMIT = 3
IMAGE_SEARCH_MAX_RESULTS = 20

# Fuzzy product search (0..1 similarity)
FUZZY_MIN_SCORE = 0.3
FUZZY_MAX_RESULTS = 100
FUZZY_MIN_MATCH_CHARS = 2
# a field counts only at this ratio (0..100) or better
FUZZY_MATCH_THRESHOLD = 60
# shorter terms must appear verbatim
FUZZY_APPROX_MIN_LENGTH = 3
FUZZY_FIELD_WEIGHTS = {
    "name": 3.0,
    "brand": 2.0,
    "category": 1.5,
    "description": 1.0,
    "tags": 1.5,
    "sku": 1.0,
    "model": 1.5,
}
