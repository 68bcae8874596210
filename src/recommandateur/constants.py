# Constants shared by the list store, the recommendation pipeline and the API

# Well-known store keys. The store holds one value per key, never one key per item.
META_KEY = "meta"
SETTINGS_KEY = "settings"
RATINGS = "ratings"
PARKED = "parked"
REJECTS = "rejects"
PARKED_PODIUM = "parked_podium"

COLLECTIONS = (RATINGS, PARKED, REJECTS)
ALL_KEYS = (META_KEY, SETTINGS_KEY, RATINGS, PARKED, REJECTS, PARKED_PODIUM)

# Title types accepted by the recommendation query
TITLE_TYPES = ("film", "serie")

# Pagination of list reads
DEFAULT_LIMIT = 1000
MAX_LIMIT = 5000

# Parked podium holds at most this many keys
PODIUM_SIZE = 3

# Payload ceilings (bytes)
MAX_BODY_BYTES = 512 * 1024
MAX_LIST_ITEM_BYTES = 32 * 1024

# Genre query keywords (matched on the accent-folded, lower-cased query)
ALL_GENRES_KEYWORD = "tous"
HORROR_KEYWORDS = ("horreur", "epouvante", "frisson", "gore", "peur")

# Rating thresholds used when the stored settings carry none
DEFAULT_THRESHOLD = 3.0
HORROR_THRESHOLD = 2.5

# Score weights used when the stored settings carry none
DEFAULT_WEIGHTS = {"allocine": 0.6, "user_pref": 0.2, "castcrew": 0.2}

# Card rendering fallbacks
MISSING_TEMPLATE = "⚠️ Pas de template l1_card"
MISSING_NOTE = "–"
MISSING_VALUE = "N/A"
MISSING_SUMMARY = "Résumé indisponible."
MISSING_POSTER = "https://dummyimage.com/600x800/cccccc/000000&text=Affiche"
GENRE_JOINER = " • "

NO_RECOMMENDATION = "Aucune recommandation valide trouvée."
