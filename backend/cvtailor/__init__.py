"""Profile storage and LLM-tailored CV generation backend."""
