# app/schemas/movie.py

from typing import List, Optional
from pydantic import BaseModel, Field


class Genre(BaseModel):
    id: int = Field(description="장르 ID")
    name: str = Field(description="장르 이름")


class MovieSummary(BaseModel):
    """TMDB 목록/검색 결과용 영화 정보"""

    id: int = Field(description="TMDB 영화 ID")
    title: str = Field(default="", description="영화 제목")
    overview: Optional[str] = Field(default=None, description="줄거리")
    poster_path: Optional[str] = Field(default=None, description="포스터 경로")
    backdrop_path: Optional[str] = Field(default=None, description="배경 이미지 경로")
    release_date: Optional[str] = Field(default=None, description="개봉일")
    vote_average: float = Field(default=0.0, description="TMDB 평균 평점")
    vote_count: int = Field(default=0, description="TMDB 투표 수")
    genre_ids: List[int] = Field(default_factory=list, description="장르 ID 목록")


class MovieDetails(MovieSummary):
    """TMDB 영화 상세 정보"""

    runtime: Optional[int] = Field(default=None, description="상영시간(분)")
    genres: List[Genre] = Field(default_factory=list, description="장르 목록")
    tagline: Optional[str] = Field(default=None, description="태그라인")
    status: Optional[str] = Field(default=None, description="개봉 상태")
    budget: Optional[int] = Field(default=None, description="제작비")
    revenue: Optional[int] = Field(default=None, description="수익")


class MoviePage(BaseModel):
    """TMDB 페이지 단위 응답"""

    page: int = Field(default=1, description="현재 페이지")
    results: List[MovieSummary] = Field(default_factory=list, description="영화 목록")
    total_pages: int = Field(default=0, description="전체 페이지 수")
    total_results: int = Field(default=0, description="전체 결과 수")


class MovieRef(BaseModel):
    """피드/목록에 붙는 최소 영화 정보"""

    id: int = Field(description="TMDB 영화 ID")
    title: str = Field(description="영화 제목")
    poster_path: Optional[str] = Field(default=None, description="포스터 경로")
