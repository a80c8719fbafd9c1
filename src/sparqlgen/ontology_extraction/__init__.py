"""Knowledge graph extraction from OWL ontologies."""
