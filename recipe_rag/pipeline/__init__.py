"""
Pipeline modules for the recipe RAG engine.

Stage 1: Query Understanding   (analyzer.py, strategy.py)
Stage 2: Retrieval             (query_expansion.py, retrieval.py)
Stage 3: Ranking & Packing     (reranker.py, context_optimizer.py)
Stage 4: Answer Synthesis      (prompt_builder.py, generator.py, composer.py)

Orchestrated by: orchestrator.py
"""
