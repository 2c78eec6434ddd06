"""FitTrack: personal fitness tracking API."""
