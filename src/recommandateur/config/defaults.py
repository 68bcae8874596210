"""
Built-in configuration documents.

Each call returns a fresh document: callers may mutate the result freely.
"""

from datetime import datetime, timezone
from typing import Any, Dict

APP_NAME = "Recommandateur"
APP_VERSION = "v0.6"
CONFIG_VERSION = 4

KEYCAP_EMOJIS = ["1️⃣", "2️⃣", "3️⃣", "4️⃣", "5️⃣", "6️⃣", "7️⃣", "8️⃣", "9️⃣", "🔟"]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def default_emoji(n: int) -> str:
    """Keycap emoji for the n-th (1-based) menu entry"""
    return KEYCAP_EMOJIS[(n - 1) % len(KEYCAP_EMOJIS)]


def default_meta() -> Dict[str, Any]:
    labels = [
        "Recommandation One Shot",
        "Liste des titres mis de côté",
        "Salves d’affinage des notations",
        "Base de notation",
        "Paramètres de l’algorithme",
    ]
    menu = [{"num": i, "emoji": default_emoji(i), "label": label} for i, label in enumerate(labels, start=1)]
    return {
        "app_name": APP_NAME,
        "app_version": APP_VERSION,
        "last_updated": utc_now_iso(),
        "ui_schema_id": "menu-vierge-5",
        "menu": menu,
        "welcome_template": (
            "👋 Bienvenue dans le recommandateur ! Prêt à passer une bonne soirée ?\n\n"
            "🧠 Moteur: {app_version} • MAJ: {last_updated}\n\n"
            "Sélectionne un numéro de catégorie pour continuer :\n"
            + "\n".join(f"{m['emoji']} {m['label']}" for m in menu)
        ),
    }


def default_settings() -> Dict[str, Any]:
    return {
        "config_version": CONFIG_VERSION,
        "updated_at": utc_now_iso(),
        "thresholds": {"default": 3.0, "horror": 2.5},
        "weights": {"user_pref": 0.20, "allocine": 0.60, "castcrew": 0.20},
        "list_interpretation": {"parked_bonus": 0.10, "reject_malus": -1.0, "recency_weight": 0.15},
        "exclusions": {"rated": True, "parked": True, "rejects": True},
        "dedup": {"alias_vo_vf_vq": True, "remakes": True, "sagas": True},
        "templates": {
            "l1_card": (
                "**{titre} ({annee})** • {genres}\n"
                "P {presse}/5 • S {spectateurs}/5\n"
                "{resume}\n"
                "![Affiche]({affiche_url})"
            ),
            "l3_item": "**{titre}** — {genres} — {annee}",
            "genres": {"case": "title", "joiner": " • "},
        },
        "genre_aliases": {
            "comédie romantique": ["romcom", "rom com", "rom-com", "comedie romantique"],
            "science-fiction": ["sf", "science fiction", "anticipation", "space opera", "space-opera"],
        },
        "salves": {"formats_allowed": ["10F+5S", "20F", "10S"], "autocomplete_missing": True},
        "behaviors": {
            "global": {
                "cache_pool_enabled": True,
                "cache_pool_keys": ["ratings", "parked", "rejects"],
                "cache_pool_strategy": "always_fresh",
                "cache_pool_resync_if_empty": True,
                "cache_keys": ["ratings", "parked", "rejects"],
                "cache_sync_each_action": False,
                "cache_flush_on_write": False,
                "aggregate_writes": True,
                "flush_strategy": "end_of_turn",
                "flush_endpoint": "/backup/import",
                "flush_fallback": "per_item",
                "confirm_writes_mode": "verified",
                "write_verify": True,
                "verify_endpoint": "/backup/export",
                "verify_timeout_ms": 4000,
                "resync_before_each_action": True,
                "retry_on_sync_fail": 2,
                "backoff_ms": 400,
                "show_menu_after_action": True,
                "show_onboarding": False,
                "suppress_connector_logs": True,
            },
            "l1": {
                "ask_type_first": True,
                "intro_random_from_pool": True,
                "loop_on_response": True,
                "auto_commit_actions": True,
                "next_after_action": "immediate",
                "show_card_always": True,
                "accept_synonyms": ["suivant", "next", "skip"],
                "rating_regex": r"^(?:[0-5](?:[\.,][0-9])?)\/5$",
                "accroche": {"source": "synopsis_web", "max_chars": 180, "fallback": "Pitch bref indisponible."},
                "castcrew_preferences": {"favorites": [], "blacklist": []},
            },
            "l2": {"group_by": "genre", "order": "added_at_desc"},
            "l4": {
                "podium_sizes": {"films": 5, "series": 5},
                "sort": {"primary": "note_desc", "tiebreak": ["added_at_desc"]},
            },
            "l5": {"allow_natural_commands": True},
        },
        "ux_prompts": {
            "l1_intro_pool": [
                "Hop ! Voici une reco taillée pour toi.",
                "Allez, un titre pile dans tes goûts.",
                "On tente ça pour ta soirée ?",
                "Je pense que celui-ci va te plaire.",
                "Essai instantané : regarde ça.",
                "Petit shot ciné rien que pour toi.",
                "J’ai un bon pressentiment pour celui-là.",
                "Coup d’œil express :",
                "Celui-ci coche toutes les cases.",
                "Prêt à découvrir une pépite ?",
            ],
            "l1_cta": "Réponds : \"x,x/5\" pour noter • \"met de côté\" • \"pas intéressé\" • \"suivant\".",
            "l1_on_no_pool": "Aucun titre ne correspond pour l’instant. Essaie un autre genre ou lance une salve (L3).",
            "l2_intro": "Voici tes titres mis de côté, classés par genre (les plus récents en premier).",
            "l2_empty": "Aucun titre mis de côté pour le moment.",
            "sync_error": "⚠️ Sync indisponible.",
            "auth_error": "⚠️ Accès non autorisé à la base distante.",
        },
    }
