from .chunk import Chunk, ChunkType
from .job import IngestionJob, IngestionRequest, JobStatus, RepositoryRecord
from .query import QueryParams, RankedChunk, SearchFilters, SearchHit, SourceRef
from .session import Interaction, Session
