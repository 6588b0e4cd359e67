from .adjustment import adjustment_sets, is_adjustment_set, mediators, NotIdentifiable
