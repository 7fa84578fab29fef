# groundrank

groundrank ranks web search results and reports how well each one is
backed by other sources. You give it candidate documents that some
retrieval step has already found, for example a keyword index and a
vector index. It returns an ordered list in which every result carries:

- a relevance score,
- a confidence value and a verification status,
- the claims and contradictions that concern it.

The response also holds warnings, for example when the results come from
too few distinct organisations.

## Installation

```
pip install groundrank
```

To run the tests:

```
pip install "groundrank[test]"
pytest
```

## The five stages

`RankingPipeline.rank(candidates, query, top_k)` runs five stages:

1. **Fusion.** Each candidate's `bm25_rank` and `vector_rank` are combined
   as `sum(1 / rank**2)`. When a candidate has neither rank, the score is
   the mean of `bm25_score` and `vector_score`. The list is cut to the
   larger of `bm25_top_k` and `hnsw_top_k`.
2. **Reranking.** This stage runs only when a reranker is given. The
   reranker scores each (query, first 512 characters of the body) pair.
   The new score is `0.3 * fusion + 0.7 * reranker score`. The list is then
   cut to `rerank_top_k`. Scores below `min_relevance_score` are dropped
   when that value is positive.
3. **Authority and freshness.** The score is scaled by the source tier and
   by an exponential age decay. The weights depend on the query type that
   `detect_query_type` finds: news, research, technical, factual or
   general. The 30 best results are kept.
4. **Verification.**
   - Key phrases are cross-checked between sources. Phrases that share at
     least 60% of their longer words count as the same claim.
   - Numbers that differ by more than 20% under the same context are
     flagged as contradictions.
   - An echo chamber is reported when fewer than `min_unique_orgs`
     organisations back the results.
   - If an NLI model is given, the contradictions it finds between the
     opening sentences of the top five documents are added.
5. **Diversity.** The results go through three filters:
   - near-duplicates are removed by 64-bit fingerprint, at a Hamming
     distance of 3 bits or less;
   - each domain is capped at `max_results_per_domain` results;
   - once three results are kept, a candidate is skipped if its maximal
     marginal relevance score is negative.

## Usage

```python
from groundrank.authority import classify_domain
from groundrank.pipeline import RankCandidate, RankerConfig, RankingPipeline

pipeline = RankingPipeline(RankerConfig())

candidates = [
    RankCandidate(
        url="https://nature.com/article",
        domain="nature.com",
        title="Findings",
        body_text="Research shows interesting findings about the topic with data and analysis.",
        source_tier=classify_domain("nature.com"),
        bm25_rank=1,
    ),
]

response = pipeline.rank(candidates, "research findings", top_k=10)
for result in response.results:
    print(result.url, result.relevance_score, result.verification, result.confidence)
print(response.warnings, response.coverage_score)
```

### Optional components

`RankingPipeline(config, fingerprint=None, snippet=None, reranker=None, nli_model=None)`
takes these optional arguments:

- `reranker` and `nli_model`: instances of a subclass of
  `CrossEncoderModel` that implements `score_pairs`, returning one
  `PairScore` for each pair. For NLI, the first three logits are read in
  the order contradiction, entailment, neutral. If `score_pairs` raises,
  the error is logged and the stage goes on without that model.
- `fingerprint`: a function from text to a 64-bit integer. The default is
  a content hash, so it only catches bodies that are exactly the same. To
  catch near-duplicates, pass a SimHash-style function.
- `snippet`: a function `(body, query, max_chars)` that builds each
  result's `content`. The default returns the first 1500 characters of the
  body.

### Individual building blocks

```python
from groundrank.authority import authority_boost, classify_domain, domain_to_org
from groundrank.fusion import isr_fuse, mmr_select
from groundrank.query_type import detect_query_type

classify_domain("cs.stanford.edu")         # SourceTier.TIER1
domain_to_org("www.bbc.co.uk")             # "bbc.co.uk"
detect_query_type("latest news on rates")  # QueryType.NEWS

fused = isr_fuse([
    [("doc1", 0.9), ("doc2", 0.8)],
    [("doc2", 0.95), ("doc1", 0.85)],
])
```

The other modules:

- `groundrank.freshness`: `freshness_decay(published_date, query_type, now=None)`
  and `authority_freshness_boost`.
- `groundrank.diversity`: `diversify`, `hamming_distance` and
  `cosine_similarity`.
- `groundrank.hallucination`: `check_hallucination` and
  `extract_number_claims`.
- `groundrank.models`: the shared enums and the `Claim` and
  `Contradiction` records.

## What it does not do

groundrank only orders and annotates documents it is given. It does not:

- crawl pages, fetch URLs, or extract text from HTML;
- build or query any index;
- download or run machine-learning models. Reranking and NLI happen only
  through objects you pass in;
- provide a command-line tool or a server.