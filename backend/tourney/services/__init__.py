"""
Services Layer

Pure business logic services that:
- Accept domain inputs (tournament descriptors, rosters, sessions)
- Return domain outputs (schedule results, models)
- Do NOT depend on HTTP request/response objects
- Do NOT mutate data unless explicitly designed to (match persistence does)
"""
