"""EduRelay: course media upload relay and upload client."""
