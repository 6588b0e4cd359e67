from .pcalg import skeleton, orient_vstructures, pcalg, pcalg_from_data
