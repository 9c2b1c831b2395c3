"""
Redis Lua scripts for token flag management.

These scripts run as a single atomic step on the Redis server, so two processes
racing on the same token id cannot both observe it as unrevoked.
"""

# Sets the revoked marker unless it is already there. A pending-rotation marker
# is overwritten. Returns 1 when this call revoked the token, 0 otherwise.
REVOKE_EXCLUSIVE_SCRIPT = """
local flag_key = KEYS[1]
local ttl_seconds = ARGV[1]
local revoked_flag = ARGV[2]

if redis.call('GET', flag_key) == revoked_flag then
    return 0
end

redis.call('SET', flag_key, revoked_flag, 'EX', ttl_seconds)
return 1
"""
