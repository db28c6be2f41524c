from __future__ import annotations

PROMPT = "bencedit> "

MANY_FILES_WARNING = (
    "Warning: Many files were passed to interactive mode, "
    "only the first one will be loaded."
)
UNSAVED_ON_EOF_WARNING = "Warning: input ended with unsaved changes; they were discarded."
NO_TRANSFORMS_WARNING = (
    "Warning: no transforms given; files will only be checked for validity."
)

CONFIRM_DISCARD_QUIT = "Discard unsaved changes and quit?"
CONFIRM_DISCARD_RELOAD = "Discard unsaved changes and reload {path}?"
CONFIRM_OVERWRITE = "Overwrite existing file {path}?"

BATCH_NEEDS_CONFIRMATION = (
    "{prompt} (batch mode never prompts; pass --yes to confirm automatically)"
)
EARLIER_SAVE_NOTE = "an earlier save transform had already written the file"
