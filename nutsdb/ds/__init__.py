"""In-memory data structures: lists, sets and sorted sets."""