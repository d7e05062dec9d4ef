"""audiosprite: combine audio clips into one sprite with a timeline map."""
