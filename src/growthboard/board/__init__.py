"""Board views: vault search and kanban columns."""
