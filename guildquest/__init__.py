"""Guild quest reward engine."""
