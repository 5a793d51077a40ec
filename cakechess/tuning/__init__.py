"""Dataset loading, evaluation tracing and weight optimisation."""