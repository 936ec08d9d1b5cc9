# Inbound
ROOM_CREATE = "room:create"
ROOM_JOIN = "room:join"
ROOM_LEAVE = "room:leave"
GAME_START = "game:start"
GUESS_NEW = "guess:new"
DRAW_START = "draw:start"
DRAW_MOVE = "draw:move"
DRAW_CLEAR = "draw:clear"

DRAW_EVENTS = (DRAW_START, DRAW_MOVE, DRAW_CLEAR)

# Outbound
ROOM_CREATED = "room:created"
ROOM_JOINED = "room:joined"
ROOM_STATE = "room:state"
GAME_STATE = "game:state"
TURN_BEGIN = "game:beginClient"
TIMER_TICK = "timer:tick"
GUESS_CORRECT = "guess:correct"
CHAT = "chat:new"
GAME_OVER = "game:over"
ERROR_TOAST = "error:toast"
