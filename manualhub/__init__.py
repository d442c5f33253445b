"""Manual catalog and question-answering backend."""
