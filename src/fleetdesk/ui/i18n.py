"""i18n: French-first UI translation layer for FleetDesk.

Usage::

    from fleetdesk.ui.i18n import t, error_message

    title = t("app.title")
    msg = t("table.page", page=2, pages=5)

    # Wizard errors carry their own key
    text = error_message(exc)

Only French is currently supported. The architecture allows adding other
languages later by swapping the active dictionary.
"""

from __future__ import annotations

from fleetdesk.core.errors import ImportWizardError, RequiredFieldsError

# ---------------------------------------------------------------------------
# French string dictionary
# ---------------------------------------------------------------------------

FR: dict[str, str] = {
    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------
    "app.title": "FleetDesk — Tableau de bord de la flotte",
    "app.ready": "Prêt.",
    "app.startup_error.title": "FleetDesk — erreur au démarrage",
    "app.startup_error.body": "Une erreur fatale est survenue au démarrage :\n\n{tb}",

    # ------------------------------------------------------------------
    # Data table
    # ------------------------------------------------------------------
    "table.filter.all": "Tous",
    "table.filter.option": "{label} ({count})",
    "table.search.placeholder": "Rechercher…",
    "table.delete_selected": "Supprimer ({count})",
    "table.empty": "Aucun résultat.",
    "table.selection": "{selected} sur {total} ligne(s) sélectionnée(s).",
    "table.page": "Page {page} sur {pages}",
    "table.page_size": "Résultat par page",
    "table.first_page": "«",
    "table.previous_page": "‹",
    "table.next_page": "›",
    "table.last_page": "»",
    "table.actions.tooltip": "Actions sur la ligne",
    "table.select_all": "Tout sélectionner sur la page",

    # ------------------------------------------------------------------
    # Delete confirmation
    # ------------------------------------------------------------------
    "delete.title": "Confirmer la suppression",
    "delete.body": "Supprimer {count} élément(s) ? Cette action est irréversible.",
    "delete.confirm": "Supprimer",
    "delete.cancel": "Annuler",
    "delete.done": "{count} élément(s) supprimé(s).",

    # ------------------------------------------------------------------
    # Drawer
    # ------------------------------------------------------------------
    "drawer.title": "Détails",
    "drawer.close": "Fermer",

    # ------------------------------------------------------------------
    # Import wizard
    # ------------------------------------------------------------------
    "import.step.upload": "1. Fichier",
    "import.step.map": "2. Colonnes",
    "import.step.preview": "3. Aperçu",
    "import.choose_file": "Choisir un fichier…",
    "import.file_filter": "Tableurs (*.csv *.tsv *.txt *.xlsx *.xlsm *.xls);;Tous les fichiers (*)",
    "import.no_file": "Aucun fichier sélectionné.",
    "import.parsing": "Lecture de « {name} »…",
    "import.loaded": "{name} : {rows} ligne(s), {cols} colonne(s).",
    "import.map.column": "Colonne du fichier",
    "import.map.ignore": "— Ignorer —",
    "import.map.required": "{label} *",
    "import.preview.summary": "{count} ligne(s) prête(s) à importer.",
    "import.preview.hidden": "… et {count} ligne(s) de plus non affichée(s).",
    "import.preview.skipped": "{count} ligne(s) ignorée(s).",
    "import.back": "Retour",
    "import.next": "Suivant",
    "import.confirm": "Importer",
    "import.cancel": "Annuler",
    "import.success": "Import réussi ({count} ligne(s)).",
    "import.merge_result": "{created} créée(s), {updated} mise(s) à jour.",

    # ------------------------------------------------------------------
    # Import errors (keys match ImportWizardError.message_key)
    # ------------------------------------------------------------------
    "import.error.title": "Import impossible",
    "import.error.generic": "L'import a échoué.",
    "import.error.parse": "Impossible de lire le fichier (en-tête ou données manquants).",
    "import.error.required": "Champs requis non mappés : {detail}",
    "import.error.no_rows": "Aucune ligne valide à importer.",
    "import.error.state": "Action impossible à cette étape de l'import.",

    # ------------------------------------------------------------------
    # Row operations
    # ------------------------------------------------------------------
    "ops.error.title": "Opération échouée",
    "ops.error.body": "La modification a été annulée :\n{detail}",
    "ops.updated": "Ligne mise à jour.",
}

# Active language dictionary (only FR for now)
_ACTIVE: dict[str, str] = FR


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def t(key: str, **kwargs: object) -> str:
    """Return the UI string for *key*, with optional format substitutions.

    If the key is not found, returns the key itself (fail-visible).
    """
    template = _ACTIVE.get(key, key)
    if kwargs:
        try:
            return template.format(**kwargs)
        except (KeyError, ValueError):
            return template
    return template


def error_message(exc: ImportWizardError) -> str:
    """French notice for a wizard error."""
    if isinstance(exc, RequiredFieldsError):
        return t(exc.message_key, detail=", ".join(exc.missing))
    return t(exc.message_key, detail=exc.detail)
