"""Board representation, bitboards, attack tables and move encoding used by the evaluation tuner."""