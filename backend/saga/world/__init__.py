"""Long-lived player / familiar bookkeeping."""
