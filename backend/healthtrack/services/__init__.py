from .classifier import classify, classify_blood_pressure, classify_blood_sugar
from .enrichment import AnalysisClient, EnrichmentResult
from .guard import guard
from .ingestion import StoredReading, analyze, ingest
from .storage import ReadingStorage
