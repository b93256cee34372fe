"""Feed domain: post models, relevance scoring and feed ordering."""
