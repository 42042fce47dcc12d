"""NewBridge community resource directory API."""
