from fastapi import APIRouter, Response, status

router = APIRouter()

# 채널 관련 API는 아직 미구현 (빈 200 응답)


# 채널 정보
@router.get("/{channel_id}")
async def get_channel(channel_id: str):
    return Response(status_code=status.HTTP_200_OK)


# 채널 구독자 수
@router.get("/{channel_id}/subscribers")
async def get_channel_subscribers(channel_id: str):
    return Response(status_code=status.HTTP_200_OK)


# 채널의 동영상 목록
@router.get("/{channel_id}/movie")
async def get_channel_movies(channel_id: str):
    return Response(status_code=status.HTTP_200_OK)


# 채널 생성
@router.post("")
async def create_channel():
    return Response(status_code=status.HTTP_200_OK)


# 채널 편집
@router.put("/{channel_id}")
async def update_channel(channel_id: str):
    return Response(status_code=status.HTTP_200_OK)


# 채널 삭제
@router.delete("/{channel_id}")
async def delete_channel(channel_id: str):
    return Response(status_code=status.HTTP_200_OK)
