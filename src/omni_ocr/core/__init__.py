"""Recognition core: adapter, service facade, cancellation and executor."""
